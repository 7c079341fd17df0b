from __future__ import annotations

import sys
from typing import Sequence, TextIO

from rich.console import Console
from rich.text import Text

from taskboard.config import DashboardTheme, TaskSpec
from taskboard.executor import DEFAULT_BUFFER_LINES, CancelToken, Task, TaskStatus, start_tasks
from taskboard.formatters import FormatterRegistry, IndicatorStatus, default_registry

SUMMARY_WIDTH = 100


def format_elapsed(seconds: float) -> str:
    """Duration rounded to 10ms, in compact unit form.

    ``0s``, ``450ms``, ``1.23s``, ``1m0s``, ``2m3.4s``, ``1h0m5s``.
    """
    centis = round(seconds * 100)
    if centis == 0:
        return "0s"
    if centis < 100:
        return f"{centis * 10}ms"

    minutes, centis = divmod(centis, 6000)
    hours, minutes = divmod(minutes, 60)
    secs = f"{centis / 100:.2f}".rstrip("0").rstrip(".") + "s"
    if hours:
        return f"{hours}h{minutes}m{secs}"
    if minutes:
        return f"{minutes}m{secs}"
    return secs


def _console(out: TextIO) -> Console:
    # markup/emoji off: task output and "[group/name]" prefixes are literal text
    return Console(
        file=out,
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
        width=SUMMARY_WIDTH,
    )


def run_non_tty(
    specs: Sequence[TaskSpec],
    out: TextIO | None = None,
    *,
    cancel: CancelToken | None = None,
    theme: DashboardTheme | None = None,
    registry: FormatterRegistry | None = None,
    buffer_lines: int = DEFAULT_BUFFER_LINES,
) -> int:
    out = out or sys.stdout
    theme = theme or DashboardTheme()
    registry = registry or default_registry()
    console = _console(out)

    tasks, updates = start_tasks(specs, cancel, buffer_lines=buffer_lines)
    batch = [registry.prefers_batch(task.spec.command) for task in tasks]

    for update in updates:
        if update.has_line and not batch[update.index]:
            console.print(f"[{tasks[update.index].spec.label}] {update.line}")

    return render_summary(console, tasks, theme, registry)


def classify(task: Task, registry: FormatterRegistry) -> IndicatorStatus:
    """Content-aware verdict, falling back to the exit status."""
    indicator = registry.status(task.spec.command, task.output())
    if indicator is not IndicatorStatus.DEFAULT:
        return indicator
    if task.status is TaskStatus.FAILED:
        return IndicatorStatus.ERROR
    return IndicatorStatus.SUCCESS


def render_summary(
    console: Console, tasks: list[Task], theme: DashboardTheme, registry: FormatterRegistry
) -> int:
    for task in tasks:
        lines = task.output()
        if not lines:
            continue
        formatted = registry.format(task.spec.command, lines, SUMMARY_WIDTH)
        if formatted.plain.rstrip("\n") != "\n".join(lines):
            console.print()
            console.print(formatted)

    icons = theme.icons
    glyphs = {
        IndicatorStatus.SUCCESS: icons.success,
        IndicatorStatus.WARNING: icons.warning,
        IndicatorStatus.ERROR: icons.error,
    }

    failures = 0
    console.print()
    console.print("Summary:")
    for task in tasks:
        verdict = classify(task, registry)
        if verdict is IndicatorStatus.ERROR:
            failures += 1
        line = Text(f"  {glyphs[verdict]} {task.spec.label} ({format_elapsed(task.duration())})")
        console.print(line)

    if failures:
        console.print()
        console.print(f"{failures} task(s) failed")
        return 1
    return 0
