from __future__ import annotations

from rich.text import Text

from .styles import DEFAULT_STYLES, FormatterStyles
from .types import IndicatorStatus

_TOOLCHAIN_NOISE = (
    "go: downloading",
    "go: extracting",
    "go: finding",
    "go: upgraded",
    "go: added",
)


def _non_empty(lines: list[str]) -> list[str]:
    return [stripped for stripped in (line.strip() for line in lines) if stripped]


def _listing(
    text: Text, items: list[str], limit: int | None, styles: FormatterStyles
) -> Text:
    for i, item in enumerate(items):
        if limit is not None and i >= limit:
            text.append(f"  ... and {len(items) - limit} more\n", style=styles.muted)
            break
        text.append("  ")
        text.append(item, style=styles.file)
        text.append("\n")
    return text


class GofmtFormatter:
    """``gofmt -l`` lists files that need formatting and still exits 0."""

    def __init__(self, styles: FormatterStyles = DEFAULT_STYLES) -> None:
        self.styles = styles

    def matches(self, command: str) -> bool:
        return "gofmt" in command

    def _files(self, lines: list[str]) -> list[str]:
        return [line for line in _non_empty(lines) if line.endswith(".go")]

    def format(self, lines: list[str], width: int) -> Text:
        files = self._files(lines)
        if not files:
            return Text("✓ All files formatted correctly\n", style=self.styles.success)

        text = Text(f"✗ {len(files)} files need formatting:", style=self.styles.error)
        text.append("\n\n")
        return _listing(text, files, None, self.styles)

    def get_status(self, lines: list[str]) -> IndicatorStatus:
        # nothing listed: the exit status decides
        if self._files(lines):
            return IndicatorStatus.WARNING
        return IndicatorStatus.DEFAULT

    def quick_metric(self, lines: list[str]) -> str:
        count = len(self._files(lines))
        return f" {count}" if count else ""


class GoVetFormatter:
    def __init__(self, styles: FormatterStyles = DEFAULT_STYLES) -> None:
        self.styles = styles

    def matches(self, command: str) -> bool:
        return "go vet" in command

    def format(self, lines: list[str], width: int) -> Text:
        issues = _non_empty(lines)
        if not issues:
            return Text("✓ No issues found\n", style=self.styles.success)

        text = Text(f"✗ {len(issues)} issues:", style=self.styles.error)
        text.append("\n\n")
        return _listing(text, issues, 15, self.styles)

    def quick_metric(self, lines: list[str]) -> str:
        count = len(_non_empty(lines))
        return f" {count}" if count else ""


class GoBuildFormatter:
    def __init__(self, styles: FormatterStyles = DEFAULT_STYLES) -> None:
        self.styles = styles

    def matches(self, command: str) -> bool:
        return "go build" in command

    def format(self, lines: list[str], width: int) -> Text:
        errors = [line for line in _non_empty(lines) if not line.startswith(_TOOLCHAIN_NOISE)]
        if not errors:
            return Text("✓ Build successful\n", style=self.styles.success)

        text = Text("✗ Build failed:", style=self.styles.error)
        text.append("\n\n")
        return _listing(text, errors, 20, self.styles)


def is_structured_log_line(line: str) -> bool:
    # slog/logfmt: level=ERROR is metadata, not a failure
    return "time=" in line and "level=" in line


class PlainFormatter:
    """Fallback: raw lines, with error and warning lines tinted."""

    def __init__(self, styles: FormatterStyles = DEFAULT_STYLES) -> None:
        self.styles = styles

    def matches(self, command: str) -> bool:
        return True

    def format(self, lines: list[str], width: int) -> Text:
        text = Text()
        for i, line in enumerate(lines):
            if i:
                text.append("\n")
            text.append(line, style=self._style_for(line))
        return text

    def _style_for(self, line: str):
        if is_structured_log_line(line):
            return None

        lower = line.lower()
        if "error" in lower or "fail" in lower or "panic" in lower:
            return self.styles.error_line
        if "warn" in lower:
            return self.styles.warn_line
        return None
