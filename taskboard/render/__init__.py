from .non_tty import classify, format_elapsed, render_summary, run_non_tty

__all__ = ["run_non_tty", "render_summary", "classify", "format_elapsed"]
