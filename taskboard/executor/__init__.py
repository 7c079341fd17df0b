from .runner import MAX_LINE_BYTES, UpdateStream, start_tasks
from .task import DEFAULT_BUFFER_LINES, Task
from .types import CancelToken, TaskStatus, TaskUpdate

__all__ = [
    "start_tasks",
    "UpdateStream",
    "MAX_LINE_BYTES",
    "Task",
    "DEFAULT_BUFFER_LINES",
    "CancelToken",
    "TaskStatus",
    "TaskUpdate",
]
