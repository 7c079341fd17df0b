from __future__ import annotations

import argparse

from taskboard import __version__


def _add_sources(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        help="Structured task file (.yml, .yaml, .toml or .json)",
    )
    parser.add_argument(
        "--manifest",
        help="Text manifest of tasks, '-' for stdin",
    )
    parser.add_argument(
        "--task",
        dest="tasks",
        action="append",
        default=[],
        metavar="GROUP/NAME:COMMAND",
        help="Add a task (repeatable); the group defaults to 'Tasks'",
    )


def _positive_float(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if seconds <= 0:
        raise argparse.ArgumentTypeError("timeout must be positive")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug details (to --log-file while the dashboard is shown)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to this file instead of stderr",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    # run
    run = subparsers.add_parser("run", help="Run tasks with a live dashboard")
    _add_sources(run)
    run.add_argument(
        "--title",
        help="Dashboard title",
    )
    run.add_argument(
        "--theme",
        help="File with a 'dashboard' theme section",
    )
    run.add_argument(
        "--no-tui",
        action="store_true",
        help="Stream prefixed output and a summary even on a terminal",
    )
    run.add_argument(
        "--timeout",
        type=_positive_float,
        metavar="SECONDS",
        help="Kill every task still running after this many seconds",
    )

    # list
    ls = subparsers.add_parser("list", help="List tasks")
    _add_sources(ls)

    return parser
