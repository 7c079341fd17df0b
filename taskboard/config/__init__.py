from .loader import load_manifest, load_theme, parse_manifest, parse_task_flag
from .types import (
    ConfigError,
    DashboardTheme,
    ManifestConfig,
    SpecError,
    TaskSpec,
    UnsupportedConfigFormatError,
)

__all__ = [
    "load_manifest",
    "load_theme",
    "parse_manifest",
    "parse_task_flag",
    "ConfigError",
    "DashboardTheme",
    "ManifestConfig",
    "SpecError",
    "TaskSpec",
    "UnsupportedConfigFormatError",
]
