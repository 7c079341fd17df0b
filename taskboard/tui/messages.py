"""Inputs of the dashboard state machine and the commands it hands back."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from taskboard.executor import TaskUpdate


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class TaskEvent:
    update: TaskUpdate


@dataclass(frozen=True)
class Tick:
    now: datetime


@dataclass(frozen=True)
class StreamClosed:
    pass


Message = Resize | KeyPress | TaskEvent | Tick | StreamClosed


class Command(Enum):
    NONE = auto()
    QUIT = auto()
    CANCEL = auto()
