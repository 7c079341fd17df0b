from __future__ import annotations

import argparse
import logging
import sys

from taskboard.config import (
    ConfigError,
    DashboardTheme,
    ManifestConfig,
    SpecError,
    TaskSpec,
    load_manifest,
    load_theme,
    parse_manifest,
    parse_task_flag,
)
from taskboard.executor import CancelToken
from taskboard.suite import DashboardError, Suite, SuiteError

from .args import build_parser

logger = logging.getLogger(__name__)


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        _setup_logging(args)

        match args.command:
            case "run":
                return cmd_run(args)
            case "list":
                return cmd_list(args)
            case _:
                return 2

    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except SuiteError as exc:
        return exc.exit_code

    except DashboardError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def main() -> None:
    sys.exit(run_cli())


def cmd_run(args: argparse.Namespace) -> int:
    config, specs = _collect_specs(args)

    title = args.title or (config.title if config else None) or ""
    suite = Suite(title, theme=_resolve_theme(args, config))
    for spec in specs:
        suite.add_spec(spec)

    cancel = CancelToken(timeout=args.timeout)
    suite.run(cancel, interactive=False if args.no_tui else None)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    _, specs = _collect_specs(args)
    for spec in specs:
        print(f"{spec.label}: {spec.command}")
    return 0


def _collect_specs(args: argparse.Namespace) -> tuple[ManifestConfig | None, list[TaskSpec]]:
    config = None
    specs: list[TaskSpec] = []

    if args.config:
        config = load_manifest(args.config)
        specs.extend(config.tasks)

    if args.manifest:
        specs.extend(parse_manifest(_read_manifest(args.manifest)))

    for raw in args.tasks:
        specs.append(parse_task_flag(raw))

    if not specs:
        raise SpecError("no tasks given: use --config, --manifest or --task")

    logger.debug("collected %d task(s)", len(specs))
    return config, specs


def _read_manifest(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        with open(source, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as exc:
        raise ConfigError(f"{source}: can't read manifest: {exc}") from exc


def _resolve_theme(args: argparse.Namespace, config: ManifestConfig | None) -> DashboardTheme:
    if args.theme:
        return load_theme(args.theme)
    if config is not None and config.theme is not None:
        return config.theme
    return load_theme()


def _setup_logging(args: argparse.Namespace) -> None:
    if not args.debug and not args.log_file:
        return

    level = logging.DEBUG if args.debug else logging.INFO
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if args.log_file:
        logging.basicConfig(level=level, format=fmt, filename=args.log_file, force=True)
    else:
        logging.basicConfig(level=level, format=fmt, stream=sys.stderr, force=True)
