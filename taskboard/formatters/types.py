from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from rich.text import Text


class IndicatorStatus(Enum):
    DEFAULT = "default"  # fall back to the exit status
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@runtime_checkable
class OutputFormatter(Protocol):
    def matches(self, command: str) -> bool: ...

    def format(self, lines: list[str], width: int) -> Text: ...


@runtime_checkable
class StatusIndicator(Protocol):
    def get_status(self, lines: list[str]) -> IndicatorStatus: ...


@runtime_checkable
class BatchFormatter(Protocol):
    def prefers_batch(self) -> bool: ...


@runtime_checkable
class QuickMetric(Protocol):
    def quick_metric(self, lines: list[str]) -> str: ...
