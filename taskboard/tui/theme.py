from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from rich.color import Color, ColorParseError
from rich.style import Style

from taskboard.config import DashboardTheme
from taskboard.config.types import DashboardColors, DashboardIcons

logger = logging.getLogger(__name__)

_BRIGHT = "#FAFAFA"


@dataclass(frozen=True)
class CompiledTheme:
    title_style: Style
    group_header_style: Style
    list_border_style: Style
    selected_style: Style
    unselected_style: Style
    detail_border_style: Style
    detail_header_style: Style
    status_bar_style: Style
    separator_style: Style
    success_icon_style: Style
    error_icon_style: Style
    running_icon_style: Style
    pending_icon_style: Style
    duration_style: Style
    icons: DashboardIcons
    title_text: str
    title_icon: str
    spinner_frames: tuple[str, ...]
    spinner_interval: float  # seconds


def _checked_colors(colors: DashboardColors) -> DashboardColors:
    defaults = DashboardColors()
    values = {}
    for f in fields(DashboardColors):
        value = getattr(colors, f.name)
        try:
            Color.parse(value)
        except ColorParseError:
            logger.warning("invalid colour %r for %s, using %s", value, f.name, getattr(defaults, f.name))
            value = getattr(defaults, f.name)
        values[f.name] = value
    return DashboardColors(**values)


def compile_theme(theme: DashboardTheme | None = None) -> CompiledTheme:
    theme = theme or DashboardTheme()
    c = _checked_colors(theme.colors)

    return CompiledTheme(
        title_style=Style(bold=True, color=_BRIGHT, bgcolor=c.primary),
        group_header_style=Style(bold=True, color=c.primary),
        list_border_style=Style(color=c.border),
        selected_style=Style(bold=True, color=_BRIGHT, bgcolor=c.highlight),
        unselected_style=Style(color=c.text),
        detail_border_style=Style(color=c.primary),
        detail_header_style=Style(bold=True, color=_BRIGHT, bgcolor=c.highlight),
        status_bar_style=Style(color=c.muted),
        separator_style=Style(color="#333333"),
        success_icon_style=Style(color=c.success, bold=True),
        error_icon_style=Style(color=c.error, bold=True),
        running_icon_style=Style(color=c.warning, bold=True),
        pending_icon_style=Style(color=c.muted),
        duration_style=Style(color=c.muted, italic=True),
        icons=theme.icons,
        title_text=theme.title.text,
        title_icon=theme.title.icon,
        spinner_frames=tuple(theme.spinner.frame_list()),
        spinner_interval=max(theme.spinner.interval, 1) / 1000,
    )
