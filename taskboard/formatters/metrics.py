from __future__ import annotations

import json
from typing import Any

from rich.text import Text

from .simple import PlainFormatter
from .styles import DEFAULT_STYLES, FormatterStyles
from .types import IndicatorStatus


def decode_json_lines(lines: list[str]) -> Any | None:
    payload = "\n".join(lines)
    start = payload.find("{")
    if start == -1:
        return None
    try:
        return json.loads(payload[start:])
    except json.JSONDecodeError:
        return None


class JSONMetricsFormatter:
    """A single JSON metrics document, e.g. ``cat build/metrics.json``.

    Top-level scalars are listed under "Summary", nested objects become
    their own section, and ``warnings`` / ``errors`` lists drive the status.
    Only meaningful once complete, so it is never echoed line by line.
    """

    LABEL_WIDTH = 24
    VALUE_WIDTH = 14

    def __init__(self, styles: FormatterStyles = DEFAULT_STYLES) -> None:
        self.styles = styles

    def matches(self, command: str) -> bool:
        return "metrics.json" in command or "--format=metrics" in command

    def prefers_batch(self) -> bool:
        return True

    def _document(self, lines: list[str]) -> dict[str, Any] | None:
        doc = decode_json_lines(lines)
        return doc if isinstance(doc, dict) else None

    def format(self, lines: list[str], width: int) -> Text:
        doc = self._document(lines)
        if doc is None:
            return PlainFormatter(self.styles).format(lines, width)

        s = self.styles
        text = Text()
        title = doc.get("name") if isinstance(doc.get("name"), str) else "Metrics"
        text.append(f"◉ {title}", style=s.header)
        text.append("\n\n")

        summary = {
            k: v for k, v in doc.items() if k != "name" and not isinstance(v, (dict, list))
        }
        if summary:
            self._section(text, "Summary", summary)

        for key, value in doc.items():
            if isinstance(value, dict):
                self._section(text, key, value)

        for key, style, glyph in (("errors", s.error, "✗"), ("warnings", s.warn, "⚠")):
            items = doc.get(key)
            if isinstance(items, list) and items:
                text.append(key.capitalize(), style=s.header)
                text.append("\n")
                for item in items:
                    text.append(f"  {glyph} {item}\n", style=style)
                text.append("\n")

        return text

    def _section(self, text: Text, name: str, values: dict[str, Any]) -> None:
        text.append(name, style=self.styles.header)
        text.append("\n")
        for key, value in values.items():
            if isinstance(value, (dict, list)):
                continue
            text.append(f"  {key:<{self.LABEL_WIDTH}}")
            text.append(f"{_render_value(value):>{self.VALUE_WIDTH}}", style=self.styles.file)
            text.append("\n")
        text.append("\n")

    def get_status(self, lines: list[str]) -> IndicatorStatus:
        doc = self._document(lines)
        if doc is None:
            return IndicatorStatus.DEFAULT
        if doc.get("errors"):
            return IndicatorStatus.ERROR
        if doc.get("warnings"):
            return IndicatorStatus.WARNING
        return IndicatorStatus.SUCCESS


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        return f"{value:.2f}"
    if value is None:
        return "-"
    return str(value)
