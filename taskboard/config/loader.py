import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import (
    ConfigError,
    DashboardTheme,
    ManifestConfig,
    SpecError,
    TaskSpec,
    UnsupportedConfigFormatError,
)
from .theme import build_theme

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "Tasks"
LOCAL_CONFIG_NAME = ".taskboard.yaml"


def load_manifest(path: str | Path) -> ManifestConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    raw_file = read_config_file(pure_path)
    return _build_manifest_config(raw_file)


def read_config_file(path: Path) -> Mapping[str, Any]:
    fmt = _detect_format(path)
    return _parse_file(path, fmt)


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    match fmt:
        case "yaml":
            return _parse_yaml(path)
        case "toml":
            return _parse_toml(path)
        case "json":
            return _parse_json(path)
        case _:
            raise AssertionError("Unreachable")


def _parse_yaml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: YAML parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _parse_toml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML") from exc

    return raw_file


def _parse_json(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: JSON parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_manifest_config(raw: Mapping[str, Any]) -> ManifestConfig:
    specs: list[TaskSpec] = []
    seen: set[str] = set()

    if "tasks" not in raw:
        raise ConfigError("Missing 'tasks' field")

    if not isinstance(raw["tasks"], Mapping):
        raise ConfigError(f"'tasks' must be a mapping, got {type(raw['tasks'])}")

    if len(raw["tasks"]) < 1:
        raise ConfigError("There must be at least one group in the config file")

    for group, entries in raw["tasks"].items():
        if not isinstance(group, str):
            raise ConfigError(f"Group name must be a string, got {type(group)}")

        group_norm = group.strip()

        if len(group_norm) < 1:
            raise ConfigError("A group name can't be empty")

        if not isinstance(entries, Mapping):
            raise ConfigError(f"{group_norm} must be a mapping of task name to command")

        if len(entries) < 1:
            raise ConfigError(f"{group_norm}: a group needs at least one task")

        for name, fields in entries.items():
            if not isinstance(name, str):
                raise ConfigError(f"{group_norm}: task name must be a string, got {type(name)}")

            name_norm = name.strip()

            if len(name_norm) < 1:
                raise ConfigError(f"{group_norm}: a task name can't be empty")

            label = f"{group_norm}/{name_norm}"
            if label in seen:
                raise ConfigError(f"Duplicate task after normalization: {label}")

            specs.append(_build_task_spec(group_norm, name_norm, fields))
            seen.add(label)

    title = None
    if "title" in raw:
        if not isinstance(raw["title"], str):
            raise ConfigError("'title' should be a string")
        title = raw["title"].strip() or None

    theme = None
    if "dashboard" in raw:
        if not isinstance(raw["dashboard"], Mapping):
            raise ConfigError("'dashboard' should be a mapping")
        theme = build_theme(raw["dashboard"])

    return ManifestConfig(tasks=specs, title=title, theme=theme)


def _build_task_spec(group: str, name: str, fields: Any) -> TaskSpec:
    label = f"{group}/{name}"
    keys = {"command", "env", "working_dir"}
    env = {}
    working_dir = None

    if isinstance(fields, str):
        fields = {"command": fields}

    if not isinstance(fields, Mapping):
        raise ConfigError(f"{label}: expected a command string or a mapping")

    for field in fields.keys():
        if field not in keys:
            raise ConfigError(f"{label}: Can't process: {field}")

    if "command" not in fields:
        raise ConfigError(f"{label}: missing 'command'")

    if not isinstance(fields["command"], str):
        raise ConfigError(f"{label}: The command should be a string")

    if len(fields["command"].strip()) < 1:
        raise ConfigError(f"{label}: Command missing")

    command = fields["command"].strip()

    if "env" in fields:
        if not isinstance(fields["env"], Mapping):
            raise ConfigError(f"{label}: Env should be a mapping")

        for key, item in fields["env"].items():
            if not isinstance(key, str):
                raise ConfigError(f"{label}: {key} should be a string")

            if len(key.strip()) < 1:
                raise ConfigError(f"{label}: A key can't be empty")

            if not isinstance(item, str):
                raise ConfigError(f"{label}: {item} should be a string")

            env[key.strip()] = item

    if "working_dir" in fields:
        if not isinstance(fields["working_dir"], str):
            raise ConfigError(f"{label}: The working_dir should be a string")

        if len(fields["working_dir"].strip()) < 1:
            raise ConfigError(f"{label}: Please provide a string or remove this field")

        working_dir = fields["working_dir"].strip()

    return TaskSpec(group, name, command, env, working_dir)


def parse_manifest(text: str) -> list[TaskSpec]:
    """Parse a line-oriented manifest.

    A line ending in ``:`` with no spaces opens a group; ``name: command``
    adds a task to the current group and ``group/name: command`` names its
    group explicitly.
    """
    specs: list[TaskSpec] = []
    current_group = ""

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if line.endswith(":") and " " not in line:
            current_group = line[:-1]
            continue

        left, sep, command = line.partition(":")
        if not sep:
            raise SpecError(f"line {lineno}: invalid manifest line: {line}")

        spec = _spec_from_parts(left, command, current_group or DEFAULT_GROUP)
        if spec is None:
            raise SpecError(f"line {lineno}: invalid manifest line: {line}")
        specs.append(spec)

    return specs


def parse_task_flag(raw: str) -> TaskSpec:
    left, sep, command = raw.partition(":")
    if not sep:
        raise SpecError(f"invalid task format (missing command): {raw}")

    if not command.strip():
        raise SpecError(f"invalid task format (empty command): {raw}")

    spec = _spec_from_parts(left, command, DEFAULT_GROUP)
    if spec is None:
        raise SpecError(f"invalid task format (missing name): {raw}")
    return spec


def _spec_from_parts(left: str, command: str, default_group: str) -> TaskSpec | None:
    group = default_group
    name = left.strip()
    if "/" in left:
        group_part, _, name_part = left.partition("/")
        group = group_part.strip() or default_group
        name = name_part.strip()

    command = command.strip()
    if not name or not command:
        return None

    return TaskSpec(group, name, command)


def discover_theme_path(cwd: Path | None = None) -> Path | None:
    local = (cwd or Path.cwd()) / LOCAL_CONFIG_NAME
    if local.is_file():
        return local

    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    user = Path(config_home) / "taskboard" / "config.yaml"
    if user.is_file():
        return user

    return None


def load_theme(path: str | Path | None = None) -> DashboardTheme:
    """Load the dashboard theme, falling back to defaults on any problem."""
    target = Path(path).expanduser() if path is not None else discover_theme_path()
    if target is None:
        return DashboardTheme()

    try:
        raw = read_config_file(target)
        section = raw.get("dashboard")
        if section is None:
            return DashboardTheme()
        if not isinstance(section, Mapping):
            raise ConfigError("'dashboard' should be a mapping")
        return build_theme(section)
    except (ConfigError, OSError) as exc:
        logger.warning("ignoring theme from %s: %s", target, exc)
        return DashboardTheme()
