from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from taskboard.executor import Task, TaskStatus, TaskUpdate
from taskboard.formatters import FormatterRegistry, default_registry

from .messages import Command, KeyPress, Message, Resize, StreamClosed, TaskEvent, Tick
from .theme import CompiledTheme, compile_theme
from .viewport import Viewport

MIN_LIST_WIDTH = 22
SEPARATOR_WIDTH = 1
# title line, top and bottom panel borders, status bar, one spare row
CHROME_LINES = 5
MIN_CONTENT_HEIGHT = 5
# detail header plus the blank line under it
DETAIL_HEADER_LINES = 2
# border and horizontal padding on each side of a panel
PANEL_INSET = 4

PLACEHOLDER = "Select a task to view output"


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    return f"{round(seconds, 1):.1f}s"


class DashboardModel:
    """State of the interactive dashboard.

    ``update`` is the single transition function over the message union and
    ``view`` renders the current state without touching it. Task objects are
    read for display only; the runner owns them.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        *,
        theme: CompiledTheme | None = None,
        registry: FormatterRegistry | None = None,
        title: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.tasks = list(tasks)
        self.theme = theme or compile_theme()
        self.registry = registry or default_registry()
        self.title = title or self.theme.title_text or "Dashboard"
        self._clock = clock

        self.selected = 0
        self.viewport = Viewport(placeholder=PLACEHOLDER)
        self.ready = False
        self.done = not self.tasks
        self.cancel_requested = False
        self.now = clock()

        self.width = 0
        self.height = 0
        self.list_width = 0
        self.detail_width = 0
        self.content_height = MIN_CONTENT_HEIGHT

    # transitions

    def update(self, msg: Message) -> Command:
        match msg:
            case Resize(width=width, height=height):
                self._resize(width, height)
            case KeyPress(key=key):
                return self._key(key)
            case TaskEvent(update=update):
                return self._task_event(update)
            case Tick(now=now):
                self.now = now
            case StreamClosed():
                self.done = True
                self.now = self._clock()
                self.refresh_viewport()
                if self.cancel_requested:
                    return Command.QUIT
        return Command.NONE

    def _resize(self, width: int, height: int) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)
        self.list_width = min(max(self._natural_list_width(), MIN_LIST_WIDTH), self.width // 2)
        self.detail_width = max(self.width - self.list_width - SEPARATOR_WIDTH, 0)
        self.content_height = max(self.height - CHROME_LINES, MIN_CONTENT_HEIGHT)
        self.viewport.resize(
            self.detail_width - PANEL_INSET, self.content_height - DETAIL_HEADER_LINES
        )
        self.ready = True
        self.refresh_viewport()

    def _natural_list_width(self) -> int:
        widest = 0
        for task in self.tasks:
            # "▸ group" header and "▶ ✓ name 12.3s" row
            widest = max(widest, len(task.spec.group) + 3, len(task.spec.name) + 14)
        return widest + PANEL_INSET

    def _key(self, key: str) -> Command:
        match key:
            case "q":
                if self.done:
                    return Command.QUIT
            case "up" | "k":
                self._select(self.selected - 1)
            case "down" | "j":
                self._select(self.selected + 1)
            case "pageup":
                self.viewport.page_up()
            case "pagedown":
                self.viewport.page_down()
            case "home":
                self.viewport.home()
            case "end":
                self.viewport.end()
            case "ctrl+c":
                if self.done:
                    return Command.QUIT
                self.cancel_requested = True
                return Command.CANCEL
        return Command.NONE

    def _select(self, index: int) -> None:
        if not self.tasks or not 0 <= index < len(self.tasks) or index == self.selected:
            return
        self.selected = index
        self.refresh_viewport(reset=True)

    def _task_event(self, update: TaskUpdate) -> Command:
        if not 0 <= update.index < len(self.tasks):
            return Command.NONE

        self.now = self._clock()
        if update.index == self.selected and (update.has_line or update.is_terminal):
            # finished tasks are re-rendered so the formatter sees complete output
            self.refresh_viewport()
        return Command.NONE

    def refresh_viewport(self, *, reset: bool = False) -> None:
        if not self.ready or not self.tasks:
            return
        task = self.tasks[self.selected]
        content = self.registry.format(task.spec.command, task.output(), self.viewport.width)
        self.viewport.set_content(content, reset=reset)

    def selected_task(self) -> Task | None:
        if not self.tasks:
            return None
        return self.tasks[self.selected]

    def exit_code(self) -> int:
        return 1 if any(task.status is TaskStatus.FAILED for task in self.tasks) else 0

    # rendering

    def view(self) -> RenderableType:
        if not self.ready:
            return Text("Loading dashboard...")

        t = self.theme
        title_text = f"{t.title_icon} {self.title}" if t.title_icon else self.title
        title = Text(f" {title_text}".ljust(self.width), style=t.title_style, no_wrap=True)

        list_panel = Panel(
            self._fit(self.render_list()),
            box=box.ROUNDED,
            border_style=t.list_border_style,
            padding=(0, 1),
            width=self.list_width,
            height=self.content_height + 2,
        )
        detail_panel = Panel(
            self._fit(self.render_detail()),
            box=box.ROUNDED,
            border_style=t.detail_border_style,
            padding=(0, 1),
            width=self.detail_width,
            height=self.content_height + 2,
        )
        separator = Text("\n".join("│" * (self.content_height + 2)), style=t.separator_style)

        panes = Table.grid(padding=0)
        panes.add_column(width=self.list_width)
        panes.add_column(width=SEPARATOR_WIDTH)
        panes.add_column(width=self.detail_width)
        panes.add_row(list_panel, separator, detail_panel)

        if self.done:
            help_text = "↑/↓ navigate • PgUp/PgDn scroll • q quit"
        else:
            help_text = "↑/↓ navigate • PgUp/PgDn scroll • ctrl+c cancel"
        status_bar = Text(help_text, style=t.status_bar_style, no_wrap=True)

        return Group(title, panes, status_bar)

    def _fit(self, lines: list[Text]) -> Text:
        """Pad or cut to exactly the content height so the layout never jumps."""
        lines = lines[: self.content_height]
        lines += [Text()] * (self.content_height - len(lines))
        return Text("\n").join(lines)

    def render_list(self) -> list[Text]:
        t = self.theme
        line_width = max(self.list_width - PANEL_INSET, 1)
        lines: list[Text] = []
        last_group = None

        for index, task in enumerate(self.tasks):
            if task.spec.group != last_group:
                if last_group is not None:
                    lines.append(Text())
                lines.append(
                    Text(f"{t.icons.group} {task.spec.group}", style=t.group_header_style)
                )
                last_group = task.spec.group

            status = task.status
            extra = ""
            if status.is_terminal:
                extra += self.registry.quick_metric(task.spec.command, task.output())
            if status is not TaskStatus.PENDING:
                extra += " " + format_duration(task.duration(self.now))

            icon, icon_style = self.status_icon(task)
            if index == self.selected:
                row = Text(f"{t.icons.select} {icon} {task.spec.name}{extra}", style=t.selected_style)
            else:
                row = Text("  ", style=t.unselected_style)
                row.append(icon, style=icon_style)
                row.append(f" {task.spec.name}")
                row.append(extra, style=t.duration_style)
            row.truncate(line_width, overflow="ellipsis", pad=index == self.selected)
            lines.append(row)

        return lines

    def status_icon(self, task: Task):
        t = self.theme
        match task.status:
            case TaskStatus.PENDING:
                return t.icons.pending, t.pending_icon_style
            case TaskStatus.RUNNING:
                return self.spinner_frame(task), t.running_icon_style
            case TaskStatus.SUCCESS:
                return t.icons.success, t.success_icon_style
            case TaskStatus.FAILED:
                return t.icons.error, t.error_icon_style
        return "?", None

    def spinner_frame(self, task: Task) -> str:
        frames = self.theme.spinner_frames
        started = task.started_at
        if started is None:
            return frames[0]
        elapsed = max((self.now - started).total_seconds(), 0.0)
        return frames[int(elapsed / self.theme.spinner_interval) % len(frames)]

    def render_detail(self) -> list[Text]:
        task = self.selected_task()
        if task is None:
            return [Text(PLACEHOLDER)]

        # the header glyph stays still; the list row carries the spinner
        if task.status is TaskStatus.RUNNING:
            icon = self.theme.icons.running
        else:
            icon, _ = self.status_icon(task)
        header = Text(f" {icon} {task.spec.label} ", style=self.theme.detail_header_style)
        return [header, Text(), *self.viewport.lines()]
