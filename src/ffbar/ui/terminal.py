"""
In-place terminal progress display for ffbar.

The progress line is overwritten with backspace/space/backspace triplets,
one per visible character, so it relies on the line never wrapping.
Summary and failure lines go through a rich Console.
"""

import os
import sys
from typing import Optional, TextIO

from rich.console import Console

from ffbar.config import is_script_mode
from ffbar.i18n import _
from ffbar.metrics import ProgressState, human_readable, secs_to_time

BACKSPACE = "\b \b"
FILL_CHAR = "#"
EMPTY_CHAR = " "


def _should_use_color(stream: TextIO) -> bool:
    """Check if color output should be used."""
    if os.getenv("NO_COLOR") or is_script_mode():
        return False
    try:
        return stream.isatty()
    except Exception:
        return False


def progress_bar(percent: float, width: int) -> str:
    """Create a bracketed bar, or an empty string when width is 0."""
    if width <= 0:
        return ""
    filled = int(percent * width / 100)
    filled = max(0, min(width, filled))
    return "[" + FILL_CHAR * filled + EMPTY_CHAR * (width - filled) + "]"


def _with_bar(bar: str, text: str) -> str:
    return f"{bar} {text}" if bar else text


def _size_or_unknown(kb: Optional[float]) -> str:
    return "?" if kb is None else human_readable(kb)


def placeholder_line(width: int) -> str:
    """Line shown before any progress has been parsed."""
    return _with_bar(progress_bar(0, width), "0%")


def format_progress_line(state: ProgressState, width: int, stats: bool = True) -> str:
    """
    Compose the progress line for a state that has metrics.

    Full form:    [#####     ] 50.0%/1.2MB of ~2.4MB at 300.0KB/s ETA 5s
    Reduced form: [#####     ] 50.0%
    """
    percent = state.percent or 0.0
    bar = progress_bar(percent, width)
    if not stats:
        return _with_bar(bar, f"{percent:.1f}%")

    eta = "?" if state.eta_secs is None else secs_to_time(state.eta_secs)
    text = (
        f"{percent:.1f}%/{human_readable(state.current_bytes)}"
        f" of ~{_size_or_unknown(state.estimated_total_bytes)}"
        f" at {_size_or_unknown(state.bitrate)}/s ETA {eta}"
    )
    return _with_bar(bar, text)


def format_summary_line(total_kb: float, elapsed_secs: float, throughput: float, width: int, stats: bool = True) -> str:
    """Compose the completion line with a full bar."""
    bar = progress_bar(100, width)
    elapsed = secs_to_time(elapsed_secs)
    if not stats:
        return _with_bar(bar, f"100% in {elapsed}")
    return _with_bar(bar, f"100% of {human_readable(total_kb)} in {elapsed} at {human_readable(throughput)}/s")


class Renderer:
    """Interface shared by the terminal and JSON displays."""

    def start(self, state: ProgressState) -> None:
        raise NotImplementedError

    def progress(self, state: ProgressState) -> None:
        raise NotImplementedError

    def prompt(self, fragment: str) -> None:
        raise NotImplementedError

    def summary(self, state: ProgressState, elapsed_secs: float, throughput: float) -> None:
        raise NotImplementedError

    def failure(self, state: ProgressState, elapsed_secs: float) -> None:
        raise NotImplementedError


class TerminalRenderer(Renderer):
    """Single self-overwriting progress line."""

    def __init__(self, bar_width: int = 20, stats: bool = True, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.bar_width = bar_width
        self.stats = stats
        self.rendered_line = ""

        use_color = _should_use_color(self.stream)
        self.console = Console(
            file=self.stream,
            force_terminal=use_color,
            no_color=not use_color,
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def erase(self) -> None:
        """Erase the visible line character by character."""
        if self.rendered_line:
            self._write(BACKSPACE * len(self.rendered_line))
        self.rendered_line = ""

    def show(self, line: str) -> None:
        """Replace the visible line with `line`."""
        self.erase()
        self._write(line)
        self.rendered_line = line

    def start(self, state: ProgressState) -> None:
        self.show(placeholder_line(self.bar_width))

    def progress(self, state: ProgressState) -> None:
        if not state.has_metrics:
            return
        self.show(format_progress_line(state, self.bar_width, self.stats))

    def prompt(self, fragment: str) -> None:
        # The user's answer is echoed by the terminal, so nothing stays
        # visible that a later erase should remove.
        self.erase()
        self._write(fragment)

    def summary(self, state: ProgressState, elapsed_secs: float, throughput: float) -> None:
        self.erase()
        line = format_summary_line(state.current_bytes, elapsed_secs, throughput, self.bar_width, self.stats)
        self.console.print(line, style="green")

    def failure(self, state: ProgressState, elapsed_secs: float) -> None:
        self.erase()
        self.console.print(_("Process failed!"), style="bold red")
