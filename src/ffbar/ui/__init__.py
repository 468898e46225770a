"""
User interface components for ffbar.

The terminal renderer overwrites a single line in place.
"""

from ffbar.ui.terminal import Renderer, TerminalRenderer, format_progress_line, progress_bar

__all__ = [
    "Renderer",
    "TerminalRenderer",
    "format_progress_line",
    "progress_bar",
]
