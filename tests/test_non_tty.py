# tests/test_non_tty.py
from __future__ import annotations

import io
import json
import os
import sys
from pathlib import Path

import pytest

from taskboard.config import DashboardTheme, TaskSpec
from taskboard.config.types import DashboardIcons
from taskboard.render import format_elapsed, run_non_tty


def _py(code: str) -> str:
    exe = str(Path(sys.executable))
    return f'"{exe}" -c "{code}"'


def _run(specs: list[TaskSpec], **kwargs) -> tuple[int, list[str]]:
    out = io.StringIO()
    code = run_non_tty(specs, out, **kwargs)
    return code, out.getvalue().splitlines()


@pytest.mark.skipif(os.name != "posix", reason="uses printf")
def test_two_task_scenario() -> None:
    code, lines = _run(
        [
            TaskSpec("GroupA", "A", "printf 'stdout\\n'"),
            TaskSpec("GroupA", "B", "printf 'stderr\\n' 1>&2; exit 2"),
        ]
    )

    assert code == 1
    assert "[GroupA/A] stdout" in lines
    assert "[GroupA/B] stderr" in lines
    assert "Summary:" in lines
    assert any(line.startswith("  ✓ GroupA/A (") for line in lines)
    assert any(line.startswith("  ✗ GroupA/B (") for line in lines)
    assert lines[-1] == "1 task(s) failed"


def test_all_success_returns_0() -> None:
    code, lines = _run(
        [
            TaskSpec("G", "one", _py("print('hello')")),
            TaskSpec("G", "two", _py("pass")),
        ]
    )

    assert code == 0
    assert "[G/one] hello" in lines
    assert not any("failed" in line for line in lines)


def test_summary_follows_spec_order() -> None:
    _, lines = _run(
        [
            TaskSpec("G", "slow", _py("import time; time.sleep(0.2)")),
            TaskSpec("G", "fast", _py("pass")),
        ]
    )

    summary = lines[lines.index("Summary:") + 1 :]
    assert summary[0].startswith("  ✓ G/slow")
    assert summary[1].startswith("  ✓ G/fast")


def test_batch_formatter_suppresses_live_lines(tmp_path: Path) -> None:
    (tmp_path / "metrics.json").write_text(
        json.dumps({"name": "Build", "files": 12, "warnings": ["slow test"]}),
        encoding="utf-8",
    )
    command = _py("print(open('metrics.json').read())") + " # metrics.json"
    spec = TaskSpec("Stats", "metrics", command, working_dir=str(tmp_path))

    code, lines = _run([spec])

    assert code == 0
    assert not any(line.startswith("[Stats/metrics]") for line in lines)
    assert "◉ Build" in lines
    assert any("slow test" in line for line in lines)
    assert any(line.startswith("  ⚠ Stats/metrics (") for line in lines)


def test_content_aware_status_overrides_exit_status() -> None:
    # exits 0 but lists a file that needs formatting
    spec = TaskSpec("Go", "fmt", _py("print('main.go')") + " # gofmt -l .")

    code, lines = _run([spec])

    assert code == 0
    assert "✗ 1 files need formatting:" in lines
    assert any(line.startswith("  ⚠ Go/fmt (") for line in lines)


def test_failed_tool_with_clean_listing_is_a_failure() -> None:
    # nothing listed, but the tool itself failed (e.g. not installed)
    spec = TaskSpec("Go", "fmt", _py("raise SystemExit(127)") + " # gofmt -l .")

    code, lines = _run([spec])

    assert code == 1
    assert any(line.startswith("  ✗ Go/fmt (") for line in lines)
    assert lines[-1] == "1 task(s) failed"


def test_clean_listing_with_exit_0_is_a_success() -> None:
    spec = TaskSpec("Go", "fmt", _py("pass") + " # gofmt -l .")

    code, lines = _run([spec])

    assert code == 0
    assert any(line.startswith("  ✓ Go/fmt (") for line in lines)


def test_unformatted_output_is_not_repeated() -> None:
    _, lines = _run([TaskSpec("G", "t", _py("print('only once')"))])

    assert lines.count("only once") == 0
    assert lines.count("[G/t] only once") == 1


def test_theme_icons_are_used() -> None:
    theme = DashboardTheme(icons=DashboardIcons(success="OK", error="KO"))

    code, lines = _run(
        [TaskSpec("G", "good", _py("pass")), TaskSpec("G", "bad", _py("raise SystemExit(1)"))],
        theme=theme,
    )

    assert code == 1
    assert any(line.startswith("  OK G/good (") for line in lines)
    assert any(line.startswith("  KO G/bad (") for line in lines)


def test_launch_failure_is_reported(tmp_path: Path) -> None:
    spec = TaskSpec("G", "t", "true", working_dir=str(tmp_path / "missing"))

    code, lines = _run([spec])

    assert code == 1
    assert any(line.startswith("  ✗ G/t (") for line in lines)


def test_command_with_nul_byte_is_reported_failed() -> None:
    code, lines = _run([TaskSpec("G", "nul", "echo a\x00b")])

    assert code == 1
    assert any(line.startswith("  ✗ G/nul (") for line in lines)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0.0, "0s"),
        (0.4504, "450ms"),
        (1.0, "1s"),
        (1.234, "1.23s"),
        (10.5, "10.5s"),
        (59.999, "1m0s"),
        (123.4, "2m3.4s"),
        (3605.0, "1h0m5s"),
    ],
)
def test_format_elapsed(seconds: float, expected: str) -> None:
    assert format_elapsed(seconds) == expected
