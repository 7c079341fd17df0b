# tests/test_config_loader.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskboard.config.loader import load_manifest, parse_manifest, parse_task_flag
from taskboard.config.types import (
    ConfigError,
    SpecError,
    TaskSpec,
    UnsupportedConfigFormatError,
)


# -------------------------
# Helpers
# -------------------------


def write_text(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_json(path: Path, obj: object) -> Path:
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


# -------------------------
# Basic file/path errors
# -------------------------


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_manifest(tmp_path / "missing.yaml")


def test_path_is_dir_raises_config_error(tmp_path: Path) -> None:
    d = tmp_path / "dir"
    d.mkdir()
    with pytest.raises(ConfigError):
        load_manifest(d)


def test_unsupported_extension_raises_unsupported_format(tmp_path: Path) -> None:
    p = write_text(tmp_path / "config.txt", "tasks: {}")
    with pytest.raises(UnsupportedConfigFormatError):
        load_manifest(p)


# -------------------------
# Parse errors are wrapped
# -------------------------


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "tasks: [\n"),
        (".toml", "tasks = {"),
        (".json", '{"tasks": '),
    ],
)
def test_invalid_syntax_is_wrapped_as_config_error(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"config{ext}", content)
    with pytest.raises(ConfigError):
        load_manifest(p)


# -------------------------
# Top-level shape validation
# -------------------------


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "[]\n"),
        (".yaml", "null\n"),
        (".json", "[]"),
        (".json", "null"),
    ],
)
def test_top_level_not_mapping_raises(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"config{ext}", content)
    with pytest.raises(ConfigError):
        load_manifest(p)


def test_missing_tasks_key_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "config.yaml", "not_tasks: {}\n")
    with pytest.raises(ConfigError):
        load_manifest(p)


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "tasks: []\n"),
        (".yaml", "tasks: null\n"),
        (".yaml", "tasks: {}\n"),
        (".json", '{"tasks": []}'),
        (".toml", 'tasks = "nope"\n'),
        (".toml", "[tasks]\n"),
    ],
)
def test_tasks_not_a_non_empty_mapping_raises(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"config{ext}", content)
    with pytest.raises(ConfigError):
        load_manifest(p)


# -------------------------
# Group and task names
# -------------------------


@pytest.mark.parametrize(
    "content",
    [
        "tasks:\n  1:\n    a: echo hi\n",
        'tasks:\n  "   ":\n    a: echo hi\n',
        "tasks:\n  Build: echo hi\n",
        "tasks:\n  Build: {}\n",
        "tasks:\n  Build:\n    1: echo hi\n",
        'tasks:\n  Build:\n    "  ": echo hi\n',
    ],
)
def test_invalid_group_or_task_name_raises(tmp_path: Path, content: str) -> None:
    p = write_text(tmp_path / "config.yaml", content)
    with pytest.raises(ConfigError):
        load_manifest(p)


def test_duplicate_task_after_normalization_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "config.yaml",
        "tasks:\n"
        "  Build:\n"
        "    compile: echo 1\n"
        '    " compile ": echo 2\n',
    )
    with pytest.raises(ConfigError):
        load_manifest(p)


# -------------------------
# Task fields validation
# -------------------------


@pytest.mark.parametrize(
    "fields",
    [
        "[]",
        "{}",
        "{command: echo hi, nope: 1}",
        "{command: 123}",
        '{command: "   "}',
        "{command: echo hi, env: []}",
        "{command: echo hi, env: {1: x}}",
        '{command: echo hi, env: {"  ": x}}',
        "{command: echo hi, env: {KEY: 1}}",
        "{command: echo hi, working_dir: 1}",
        '{command: echo hi, working_dir: "  "}',
    ],
)
def test_invalid_task_fields_raise(tmp_path: Path, fields: str) -> None:
    p = write_text(tmp_path / "config.yaml", f"tasks:\n  Build:\n    a: {fields}\n")
    with pytest.raises(ConfigError):
        load_manifest(p)


def test_env_key_is_stripped_value_preserved(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "config.yaml",
        'tasks:\n  G:\n    a:\n      command: echo a\n      env:\n        " KEY ": "  v  "\n',
    )
    config = load_manifest(p)
    assert config.tasks[0].env == {"KEY": "  v  "}


# -------------------------
# Optional sections
# -------------------------


def test_title_and_dashboard_are_read(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "config.yaml",
        "title: Quality gate\n"
        "tasks:\n  G:\n    a: echo a\n"
        "dashboard:\n  icons:\n    success: '+'\n",
    )
    config = load_manifest(p)
    assert config.title == "Quality gate"
    assert config.theme is not None
    assert config.theme.icons.success == "+"


def test_missing_dashboard_leaves_theme_unset(tmp_path: Path) -> None:
    p = write_text(tmp_path / "config.yaml", "tasks:\n  G:\n    a: echo a\n")
    config = load_manifest(p)
    assert config.title is None
    assert config.theme is None


@pytest.mark.parametrize(
    "extra",
    ["title: 1\n", "dashboard: []\n", "dashboard:\n  fonts: {}\n"],
)
def test_invalid_optional_sections_raise(tmp_path: Path, extra: str) -> None:
    p = write_text(tmp_path / "config.yaml", "tasks:\n  G:\n    a: echo a\n" + extra)
    with pytest.raises(ConfigError):
        load_manifest(p)


# -------------------------
# Happy paths (all formats)
# -------------------------


def test_valid_yaml_loads_in_file_order(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "config.yaml",
        "tasks:\n"
        "  Lint:\n"
        "    vet: go vet ./...\n"
        "  Build:\n"
        "    compile:\n"
        "      command: go build ./...\n"
        "      env:\n"
        "        CGO_ENABLED: '0'\n"
        "      working_dir: backend\n"
        "    test: go test ./...\n",
    )
    config = load_manifest(p)
    assert [s.label for s in config.tasks] == ["Lint/vet", "Build/compile", "Build/test"]
    assert config.tasks[1] == TaskSpec(
        "Build", "compile", "go build ./...", {"CGO_ENABLED": "0"}, "backend"
    )


def test_valid_json_loads(tmp_path: Path) -> None:
    obj = {"tasks": {"G": {"a": "echo a", "b": {"command": "echo b"}}}}
    p = write_json(tmp_path / "config.json", obj)
    config = load_manifest(p)
    assert [(s.label, s.command) for s in config.tasks] == [("G/a", "echo a"), ("G/b", "echo b")]


def test_valid_toml_loads(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "config.toml",
        'title = "CI"\n'
        "[tasks.Build]\n"
        'compile = "make"\n'
        "[tasks.Build.test]\n"
        'command = "make test"\n'
        'env = { VERBOSE = "1" }\n',
    )
    config = load_manifest(p)
    assert config.title == "CI"
    assert [s.label for s in config.tasks] == ["Build/compile", "Build/test"]
    assert config.tasks[1].env == {"VERBOSE": "1"}


# -------------------------
# Text manifests and --task flags
# -------------------------


def test_parse_manifest_groups_and_defaults() -> None:
    text = (
        "# quality gate\n"
        "fmt: gofmt -l .\n"
        "\n"
        "Build:\n"
        "  compile: go build ./...\n"
        "  test: go test ./... -run 'A|B'\n"
        "Lint/vet: go vet ./...\n"
    )

    specs = parse_manifest(text)

    assert [(s.label, s.command) for s in specs] == [
        ("Tasks/fmt", "gofmt -l ."),
        ("Build/compile", "go build ./..."),
        ("Build/test", "go test ./... -run 'A|B'"),
        ("Lint/vet", "go vet ./..."),
    ]


def test_parse_manifest_keeps_colons_in_commands() -> None:
    specs = parse_manifest("serve: python -m http.server --bind 127.0.0.1:8000\n")

    assert specs[0].command == "python -m http.server --bind 127.0.0.1:8000"


@pytest.mark.parametrize("line", ["just words", ": echo hi", "two words:", "G/: echo hi"])
def test_parse_manifest_rejects_bad_lines(line: str) -> None:
    with pytest.raises(SpecError, match="line 2"):
        parse_manifest("ok: true\n" + line + "\n")


def test_parse_manifest_empty_is_empty() -> None:
    assert parse_manifest("\n# nothing\n") == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Build/compile:go build", TaskSpec("Build", "compile", "go build")),
        ("lint: golangci-lint run", TaskSpec("Tasks", "lint", "golangci-lint run")),
        ("/x: echo 1", TaskSpec("Tasks", "x", "echo 1")),
        ("G/t: echo a:b", TaskSpec("G", "t", "echo a:b")),
    ],
)
def test_parse_task_flag(raw: str, expected: TaskSpec) -> None:
    assert parse_task_flag(raw) == expected


@pytest.mark.parametrize("raw", ["no-command", "name:", "name:   ", ":echo", "G/:echo"])
def test_parse_task_flag_rejects_incomplete(raw: str) -> None:
    with pytest.raises(SpecError):
        parse_task_flag(raw)


def test_spec_error_is_a_config_error() -> None:
    assert issubclass(SpecError, ConfigError)
