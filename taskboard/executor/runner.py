from __future__ import annotations

import logging
import queue
import threading
from datetime import datetime
from typing import IO, Iterator, Sequence

from taskboard.config import TaskSpec

from . import shell
from .task import DEFAULT_BUFFER_LINES, Task
from .types import CancelToken, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

MAX_LINE_BYTES = 1024 * 1024

_CLOSED = object()


class UpdateStream:
    """Fan-in of every task's updates, in arrival order.

    Order is preserved per task only; updates of different tasks interleave
    arbitrarily, so consumers must key their state by ``TaskUpdate.index``.
    Iteration ends once every task has finished, and nothing is delivered
    after that. The queue has a single slot: a slow consumer holds the
    producers back.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[object] = queue.Queue(maxsize=1)
        self._closed = False

    def __iter__(self) -> Iterator[TaskUpdate]:
        return self

    def __next__(self) -> TaskUpdate:
        if self._closed:
            raise StopIteration
        item = self._queue.get()
        if item is _CLOSED:
            self._closed = True
            raise StopIteration
        return item  # type: ignore[return-value]

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, update: TaskUpdate) -> None:
        self._queue.put(update)

    def close(self) -> None:
        self._queue.put(_CLOSED)


def start_tasks(
    specs: Sequence[TaskSpec],
    cancel: CancelToken | None = None,
    *,
    buffer_lines: int = DEFAULT_BUFFER_LINES,
) -> tuple[list[Task], UpdateStream]:
    cancel = cancel or CancelToken()
    stream = UpdateStream()
    tasks = [Task(spec, index, capacity=buffer_lines) for index, spec in enumerate(specs)]

    workers = []
    for task in tasks:
        worker = threading.Thread(
            target=_run_task,
            args=(task, stream, cancel),
            name=f"task-{task.index}",
            daemon=True,
        )
        workers.append(worker)

    for worker in workers:
        worker.start()

    threading.Thread(
        target=_close_when_done, args=(workers, stream), name="updates-closer", daemon=True
    ).start()

    return tasks, stream


def _close_when_done(workers: list[threading.Thread], stream: UpdateStream) -> None:
    for worker in workers:
        worker.join()
    stream.close()


def _run_task(task: Task, stream: UpdateStream, cancel: CancelToken) -> None:
    started_at = task.mark_running()
    stream.send(TaskUpdate(task.index, TaskStatus.RUNNING, started_at=started_at))

    # every task ends with exactly one terminal update, whatever happens below
    status, exit_code = TaskStatus.FAILED, 1
    try:
        status, exit_code = _supervise(task, stream, cancel)
    finally:
        _finish(task, stream, status, exit_code)


def _supervise(
    task: Task, stream: UpdateStream, cancel: CancelToken
) -> tuple[TaskStatus, int]:
    index = task.index
    try:
        proc = shell.spawn(task.spec)
    except (OSError, ValueError) as exc:
        # ValueError: arguments the OS can't take, e.g. an embedded NUL
        logger.warning("%s: failed to launch: %s", task.spec.label, exc)
        return TaskStatus.FAILED, 1

    logger.debug("%s: started pid %d", task.spec.label, proc.pid)
    unregister = cancel.on_cancel(lambda: _kill(task, proc))

    merged: queue.Queue[object] = queue.Queue(maxsize=1)
    readers = [
        threading.Thread(
            target=_read_stream, args=(pipe, merged), name=f"task-{index}-{name}", daemon=True
        )
        for name, pipe in (("stdout", proc.stdout), ("stderr", proc.stderr))
    ]
    for reader in readers:
        reader.start()
    threading.Thread(
        target=_close_merged, args=(readers, merged), name=f"task-{index}-merge", daemon=True
    ).start()

    while True:
        line = merged.get()
        if line is _CLOSED:
            break
        task.append_line(line)  # type: ignore[arg-type]
        stream.send(TaskUpdate(index, TaskStatus.RUNNING, line=line))  # type: ignore[arg-type]

    returncode = proc.wait()
    unregister()

    if returncode == 0:
        status, exit_code = TaskStatus.SUCCESS, 0
    elif returncode > 0:
        status, exit_code = TaskStatus.FAILED, returncode
    else:
        logger.debug("%s: terminated by signal %d", task.spec.label, -returncode)
        status, exit_code = TaskStatus.FAILED, 1

    logger.debug("%s: exited %d -> %s", task.spec.label, returncode, status.name)
    return status, exit_code


def _finish(task: Task, stream: UpdateStream, status: TaskStatus, exit_code: int) -> None:
    finished_at = task.finish(status, exit_code, datetime.now())
    stream.send(
        TaskUpdate(
            task.index,
            task.status,
            exit_code=task.exit_code,
            started_at=task.started_at,
            finished_at=finished_at,
        )
    )


def _kill(task: Task, proc) -> None:
    logger.info("%s: cancelled, killing pid %d", task.spec.label, proc.pid)
    shell.kill(proc)


def _read_stream(pipe: IO[bytes], merged: queue.Queue[object]) -> None:
    with pipe:
        while True:
            chunk = pipe.readline(MAX_LINE_BYTES)
            if not chunk:
                break
            merged.put(_decode_line(chunk))


def _close_merged(readers: list[threading.Thread], merged: queue.Queue[object]) -> None:
    for reader in readers:
        reader.join()
    merged.put(_CLOSED)


def _decode_line(chunk: bytes) -> str:
    if chunk.endswith(b"\n"):
        chunk = chunk[:-1]
        if chunk.endswith(b"\r"):
            chunk = chunk[:-1]
    return chunk.decode("utf-8", errors="replace")
