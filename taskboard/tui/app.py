from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError
from datetime import datetime
from typing import Sequence

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from taskboard.config import TaskSpec
from taskboard.executor import DEFAULT_BUFFER_LINES, CancelToken, UpdateStream, start_tasks
from taskboard.formatters import FormatterRegistry

from .messages import Command, KeyPress, Message, Resize, StreamClosed, TaskEvent, Tick
from .model import DashboardModel
from .theme import CompiledTheme, compile_theme

logger = logging.getLogger(__name__)


class DashboardApp(App[int]):
    """Textual host for ``DashboardModel``.

    The app only translates terminal events into model messages and carries
    out the returned commands; all state lives in the model.
    """

    CSS = """
    Screen {
        overflow: hidden;
    }
    #board {
        width: 100%;
        height: 100%;
    }
    """

    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("ctrl+c", "cancel_run", "Cancel", show=False, priority=True),
        Binding("ctrl+q", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self, model: DashboardModel, updates: UpdateStream, cancel: CancelToken, **kwargs
    ) -> None:
        super().__init__(**kwargs)
        self.model = model
        self._updates = updates
        self._cancel = cancel
        self._detached = threading.Event()

    def compose(self) -> ComposeResult:
        yield Static(id="board")

    def on_mount(self) -> None:
        self._update_model(Resize(self.size.width, self.size.height))
        self.set_interval(self.model.theme.spinner_interval, self._tick)
        threading.Thread(target=self._pump, name="dashboard-updates", daemon=True).start()

    def on_unmount(self) -> None:
        self._detached.set()

    def on_resize(self, event: events.Resize) -> None:
        self._update_model(Resize(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        self._update_model(KeyPress(event.key))

    def action_cancel_run(self) -> None:
        self._update_model(KeyPress("ctrl+c"))

    def _tick(self) -> None:
        self._update_model(Tick(datetime.now()))

    def _update_model(self, msg: Message) -> None:
        match self.model.update(msg):
            case Command.QUIT:
                self.exit(self.model.exit_code())
                return
            case Command.CANCEL:
                self._cancel.cancel()
        board = self.query("#board")
        if board:
            board.first(Static).update(self.model.view())

    def _pump(self) -> None:
        # Runs off the event loop; each update is handed over synchronously so
        # the single-slot stream keeps its backpressure.
        for update in self._updates:
            self._forward(TaskEvent(update))
        self._forward(StreamClosed())

    def _forward(self, msg: Message) -> None:
        if self._detached.is_set():
            return
        try:
            self.call_from_thread(self._update_model, msg)
        except (RuntimeError, CancelledError):
            # the app has already shut down; keep draining so tasks can finish
            self._detached.set()

    def outcome(self) -> int:
        """Exit code of a finished app.

        An app closed before the run finished (ctrl+q) has no result: the
        remaining tasks are killed and ``KeyboardInterrupt`` is raised.
        """
        if self.return_code:
            self._cancel.cancel()
            raise RuntimeError(f"dashboard exited with code {self.return_code}")
        if self.return_value is None:
            logger.info("dashboard closed before the run finished")
            self._cancel.cancel()
            raise KeyboardInterrupt
        return self.return_value


def run_dashboard(
    specs: Sequence[TaskSpec],
    *,
    cancel: CancelToken | None = None,
    theme: CompiledTheme | None = None,
    registry: FormatterRegistry | None = None,
    title: str | None = None,
    buffer_lines: int = DEFAULT_BUFFER_LINES,
) -> int:
    """Run the tasks under the interactive dashboard and return the exit code.

    Leaving before the run has finished (ctrl+q) kills the remaining tasks
    and raises ``KeyboardInterrupt``.
    """
    cancel = cancel or CancelToken()
    theme = theme or compile_theme()

    tasks, updates = start_tasks(specs, cancel, buffer_lines=buffer_lines)
    model = DashboardModel(tasks, theme=theme, registry=registry, title=title)
    app = DashboardApp(model, updates, cancel)

    app.run()
    return app.outcome()
