from .metrics import JSONMetricsFormatter
from .registry import FormatterRegistry, default_registry
from .simple import GoBuildFormatter, GofmtFormatter, GoVetFormatter, PlainFormatter
from .styles import DEFAULT_STYLES, FormatterStyles
from .types import IndicatorStatus, OutputFormatter

__all__ = [
    "FormatterRegistry",
    "default_registry",
    "IndicatorStatus",
    "OutputFormatter",
    "FormatterStyles",
    "DEFAULT_STYLES",
    "JSONMetricsFormatter",
    "GofmtFormatter",
    "GoVetFormatter",
    "GoBuildFormatter",
    "PlainFormatter",
]
