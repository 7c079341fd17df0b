from __future__ import annotations

import logging
import sys
from typing import Mapping, TextIO

from taskboard.config import DashboardTheme, SpecError, TaskSpec
from taskboard.executor import DEFAULT_BUFFER_LINES, CancelToken
from taskboard.formatters import FormatterRegistry, default_registry
from taskboard.render import run_non_tty
from taskboard.tui import compile_theme, run_dashboard

from .types import DashboardError, SuiteError

logger = logging.getLogger(__name__)


class Suite:
    """Collects tasks, then runs them under the dashboard or the plain renderer.

    Suite("Checks").add_task("Go", "vet", "go vet ./...").run()
    """

    def __init__(
        self,
        title: str = "",
        *,
        theme: DashboardTheme | None = None,
        registry: FormatterRegistry | None = None,
        buffer_lines: int = DEFAULT_BUFFER_LINES,
    ) -> None:
        self.title = title
        self.theme = theme or DashboardTheme()
        self.registry = registry or default_registry()
        self.buffer_lines = buffer_lines
        self._specs: list[TaskSpec] = []

    def __len__(self):
        return len(self._specs)

    @property
    def specs(self) -> list[TaskSpec]:
        return list(self._specs)

    def add_task(
        self,
        group: str,
        name: str,
        command: str,
        *,
        env: Mapping[str, str] | None = None,
        working_dir: str | None = None,
    ) -> Suite:
        group, name, command = group.strip(), name.strip(), command.strip()
        if not group:
            raise SpecError("task group can't be empty")
        if not name:
            raise SpecError(f"{group}: task name can't be empty")
        if not command:
            raise SpecError(f"{group}/{name}: command can't be empty")

        return self.add_spec(TaskSpec(group, name, command, dict(env or {}), working_dir))

    def add_spec(self, spec: TaskSpec) -> Suite:
        self._specs.append(spec)
        return self

    def run(
        self,
        cancel: CancelToken | None = None,
        *,
        out: TextIO | None = None,
        interactive: bool | None = None,
    ) -> None:
        """Run every task; raise ``SuiteError`` if any of them failed."""
        if not self._specs:
            return

        out = out or sys.stdout
        if interactive is None:
            interactive = _is_terminal(out)

        if interactive:
            code = self._run_dashboard(cancel)
        else:
            code = run_non_tty(
                self._specs,
                out,
                cancel=cancel,
                theme=self.theme,
                registry=self.registry,
                buffer_lines=self.buffer_lines,
            )

        if code != 0:
            raise SuiteError(code)

    def _run_dashboard(self, cancel: CancelToken | None) -> int:
        try:
            return run_dashboard(
                self._specs,
                cancel=cancel,
                theme=compile_theme(self.theme),
                registry=self.registry,
                title=self.title or None,
                buffer_lines=self.buffer_lines,
            )
        except KeyboardInterrupt:
            raise
        except Exception as exc:
            logger.debug("dashboard failed", exc_info=True)
            raise DashboardError(f"dashboard failed: {exc}") from exc


def _is_terminal(out: TextIO) -> bool:
    isatty = getattr(out, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # closed stream
        return False
