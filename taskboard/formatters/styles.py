from dataclasses import dataclass, field

from rich.style import Style


@dataclass(frozen=True)
class FormatterStyles:
    error: Style = field(default_factory=lambda: Style(color="#FF5F56", bold=True))
    warn: Style = field(default_factory=lambda: Style(color="#FFBD2E", bold=True))
    success: Style = field(default_factory=lambda: Style(color="#04B575", bold=True))
    header: Style = field(default_factory=lambda: Style(color="#0077B6", bold=True))
    file: Style = field(default_factory=lambda: Style(color="#CCCCCC"))
    muted: Style = field(default_factory=lambda: Style(color="#626262"))
    error_line: Style = field(default_factory=lambda: Style(color="#FF5F56"))
    warn_line: Style = field(default_factory=lambda: Style(color="#FFBD2E"))


DEFAULT_STYLES = FormatterStyles()
