from dataclasses import dataclass, field


@dataclass(frozen=True)
class TaskSpec:
    group: str
    name: str
    command: str
    env: dict[str, str] = field(default_factory=dict)
    working_dir: str | None = None

    @property
    def label(self) -> str:
        return f"{self.group}/{self.name}"


@dataclass
class DashboardColors:
    primary: str = "#7D56F4"
    success: str = "#04B575"
    error: str = "#FF5F56"
    warning: str = "#FFBD2E"
    muted: str = "#626262"
    text: str = "#CCCCCC"
    border: str = "#444444"
    highlight: str = "#7D56F4"


@dataclass
class DashboardIcons:
    pending: str = "○"
    running: str = "●"
    success: str = "✓"
    warning: str = "⚠"
    error: str = "✗"
    group: str = "▸"
    select: str = "▶"


@dataclass
class DashboardTitle:
    text: str = "taskboard"
    icon: str = "⚡"


@dataclass
class DashboardSpinner:
    frames: str = "⠋ ⠙ ⠸ ⠴ ⠦ ⠇"
    interval: int = 300  # ms

    def frame_list(self) -> list[str]:
        frames = [frame for frame in self.frames.split() if frame]
        return frames or DashboardSpinner().frames.split()


@dataclass
class DashboardTheme:
    colors: DashboardColors = field(default_factory=DashboardColors)
    icons: DashboardIcons = field(default_factory=DashboardIcons)
    title: DashboardTitle = field(default_factory=DashboardTitle)
    spinner: DashboardSpinner = field(default_factory=DashboardSpinner)


@dataclass
class ManifestConfig:
    tasks: list[TaskSpec]
    title: str | None = None
    theme: DashboardTheme | None = None


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class SpecError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
