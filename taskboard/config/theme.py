from dataclasses import fields
from typing import Any, Mapping

from .types import (
    ConfigError,
    DashboardColors,
    DashboardIcons,
    DashboardSpinner,
    DashboardTheme,
    DashboardTitle,
)

_SECTIONS = {
    "colors": DashboardColors,
    "icons": DashboardIcons,
    "title": DashboardTitle,
    "spinner": DashboardSpinner,
}


def build_theme(raw: Mapping[str, Any]) -> DashboardTheme:
    """Build a theme from a ``dashboard`` mapping, filling gaps from defaults."""
    sections = {}

    for key in raw.keys():
        if key not in _SECTIONS:
            raise ConfigError(f"dashboard: Can't process: {key}")

    for key, cls in _SECTIONS.items():
        section = raw.get(key) or {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"dashboard.{key} should be a mapping")
        sections[key] = _build_section(key, cls, section)

    return DashboardTheme(**sections)


def _build_section(name: str, cls: type, raw: Mapping[str, Any]):
    known = {f.name for f in fields(cls)}
    values = {}

    for key, item in raw.items():
        if key not in known:
            raise ConfigError(f"dashboard.{name}: Can't process: {key}")

        if name == "spinner" and key == "interval":
            if not isinstance(item, int) or isinstance(item, bool) or item <= 0:
                raise ConfigError("dashboard.spinner.interval should be a positive integer")
            values[key] = item
            continue

        if not isinstance(item, str):
            raise ConfigError(f"dashboard.{name}.{key} should be a string")

        # empty strings keep the default
        if item.strip():
            values[key] = item

    return cls(**values)
