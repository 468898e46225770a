"""
ffbar - single-line progress display for ffmpeg.

Runs ffmpeg with the given arguments and replaces its scrolling log with
one self-overwriting line: bar, percent, size estimate, throughput and ETA.

Example usage:
    # As a command-line tool
    $ ffbar -i movie.mkv -c:v libx264 movie.mp4
    $ ffbar --no-stats --bar-width 40 -i in.wav out.flac

    # As a Python module
    from ffbar import Config, Session

    result = Session(Config(bar_width=30)).run(["-i", "in.mkv", "out.mp4"])
"""

__version__ = "0.3.0"
__license__ = "GPL-3.0"
__description__ = "Single-line progress display for ffmpeg"

# Public API exports
from ffbar.config import Config, get_app_dirs, load_config_file
from ffbar.errors import BinaryNotFoundError, FfbarError, SpawnError, UpstreamFormatError
from ffbar.fields import Fields, extract_fields
from ffbar.json_progress import JSONRenderer
from ffbar.metrics import ProgressState, advance, human_readable, secs_to_time
from ffbar.session import RunResult, Session
from ffbar.ui.terminal import TerminalRenderer

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Config
    "Config",
    "get_app_dirs",
    "load_config_file",
    # Errors
    "FfbarError",
    "BinaryNotFoundError",
    "SpawnError",
    "UpstreamFormatError",
    # Pipeline
    "Fields",
    "extract_fields",
    "ProgressState",
    "advance",
    "human_readable",
    "secs_to_time",
    # Display
    "TerminalRenderer",
    "JSONRenderer",
    # Session
    "RunResult",
    "Session",
]
