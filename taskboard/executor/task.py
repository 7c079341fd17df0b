from __future__ import annotations

import threading
from collections import deque
from datetime import datetime

from taskboard.config import TaskSpec

from .types import TaskStatus

DEFAULT_BUFFER_LINES = 50_000


class Task:
    """Runtime state of one task.

    The runner thread that owns the task is its only writer. Every other
    thread reads through the accessors below, which share the task lock;
    ``output()`` hands out a copy so renderers never race the writer.
    """

    def __init__(
        self, spec: TaskSpec, index: int = 0, *, capacity: int = DEFAULT_BUFFER_LINES
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")

        self.spec = spec
        self.index = index
        self._lock = threading.Lock()
        self._status = TaskStatus.PENDING
        self._exit_code = -1
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None
        self._output: deque[str] = deque(maxlen=capacity)

    def __repr__(self) -> str:
        return f"Task({self.spec.label!r}, status={self.status.name}, exit_code={self.exit_code})"

    @property
    def status(self) -> TaskStatus:
        with self._lock:
            return self._status

    @property
    def exit_code(self) -> int:
        with self._lock:
            return self._exit_code

    @property
    def started_at(self) -> datetime | None:
        with self._lock:
            return self._started_at

    @property
    def finished_at(self) -> datetime | None:
        with self._lock:
            return self._finished_at

    @property
    def is_finished(self) -> bool:
        return self.status.is_terminal

    def output(self) -> list[str]:
        with self._lock:
            return list(self._output)

    def duration(self, now: datetime | None = None) -> float:
        with self._lock:
            started, finished = self._started_at, self._finished_at

        if started is None:
            return 0.0
        end = finished or now or datetime.now()
        return max((end - started).total_seconds(), 0.0)

    # Writers, called from the runner thread only.

    def append_line(self, line: str) -> None:
        with self._lock:
            self._output.append(line)

    def mark_running(self, started_at: datetime | None = None) -> datetime:
        with self._lock:
            if self._status is TaskStatus.PENDING:
                self._status = TaskStatus.RUNNING
                self._started_at = started_at or datetime.now()
            return self._started_at or datetime.now()

    def finish(
        self, status: TaskStatus, exit_code: int, finished_at: datetime | None = None
    ) -> datetime:
        if not status.is_terminal:
            raise ValueError(f"{status.name} is not a terminal status")

        with self._lock:
            if not self._status.is_terminal:
                self._status = status
                self._exit_code = exit_code
                self._finished_at = finished_at or datetime.now()
                if self._started_at is None:
                    self._started_at = self._finished_at
            return self._finished_at or datetime.now()
