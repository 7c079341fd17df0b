from __future__ import annotations

import logging
from typing import Iterable

from rich.text import Text

from .metrics import JSONMetricsFormatter
from .simple import GoBuildFormatter, GofmtFormatter, GoVetFormatter, PlainFormatter
from .types import (
    BatchFormatter,
    IndicatorStatus,
    OutputFormatter,
    QuickMetric,
    StatusIndicator,
)

logger = logging.getLogger(__name__)


class FormatterRegistry:
    """Ordered formatters; the first whose ``matches`` accepts a command wins.

    Register the most specific formatters first. A formatter that raises is
    logged and replaced by the plain fallback, so output is never hidden.
    """

    def __init__(self, formatters: Iterable[OutputFormatter] = ()) -> None:
        self._formatters: list[OutputFormatter] = list(formatters)
        self._fallback = PlainFormatter()

    def __iter__(self):
        return iter(self._formatters)

    def __len__(self):
        return len(self._formatters)

    def register(self, formatter: OutputFormatter, *, first: bool = False) -> None:
        if first:
            self._formatters.insert(0, formatter)
        else:
            self._formatters.append(formatter)

    def lookup(self, command: str) -> OutputFormatter:
        for formatter in self._formatters:
            try:
                if formatter.matches(command):
                    return formatter
            except Exception:
                logger.debug("%s.matches failed", type(formatter).__name__, exc_info=True)
        return self._fallback

    def format(self, command: str, lines: list[str], width: int) -> Text:
        formatter = self.lookup(command)
        try:
            rendered = formatter.format(lines, width)
            return rendered if isinstance(rendered, Text) else Text(str(rendered))
        except Exception:
            logger.debug(
                "%s failed, using plain output", type(formatter).__name__, exc_info=True
            )
            return self._fallback.format(lines, width)

    def status(self, command: str, lines: list[str]) -> IndicatorStatus:
        formatter = self.lookup(command)
        if not isinstance(formatter, StatusIndicator):
            return IndicatorStatus.DEFAULT
        try:
            return formatter.get_status(lines)
        except Exception:
            logger.debug("%s.get_status failed", type(formatter).__name__, exc_info=True)
            return IndicatorStatus.DEFAULT

    def prefers_batch(self, command: str) -> bool:
        formatter = self.lookup(command)
        return isinstance(formatter, BatchFormatter) and bool(formatter.prefers_batch())

    def quick_metric(self, command: str, lines: list[str]) -> str:
        formatter = self.lookup(command)
        if not isinstance(formatter, QuickMetric):
            return ""
        try:
            return formatter.quick_metric(lines)
        except Exception:
            logger.debug("%s.quick_metric failed", type(formatter).__name__, exc_info=True)
            return ""


def default_registry() -> FormatterRegistry:
    return FormatterRegistry(
        [
            JSONMetricsFormatter(),
            GofmtFormatter(),
            GoVetFormatter(),
            GoBuildFormatter(),
            PlainFormatter(),
        ]
    )
