from .app import DashboardApp, run_dashboard
from .messages import Command, KeyPress, Message, Resize, StreamClosed, TaskEvent, Tick
from .model import DashboardModel, format_duration
from .theme import CompiledTheme, compile_theme
from .viewport import Viewport

__all__ = [
    "DashboardApp",
    "run_dashboard",
    "Command",
    "KeyPress",
    "Message",
    "Resize",
    "StreamClosed",
    "TaskEvent",
    "Tick",
    "DashboardModel",
    "format_duration",
    "CompiledTheme",
    "compile_theme",
    "Viewport",
]
