"""
Command-line interface for ffbar.

This is the main entry point for the application. Wrapper options are
long-only so they never collide with ffmpeg's single-dash options; every
argument the wrapper does not recognise is forwarded to ffmpeg untouched.
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from ffbar import __version__
from ffbar.config import (
    Config,
    apply_config_to_args,
    get_app_dirs,
    get_log_path,
    load_config_file,
    save_default_config,
)
from ffbar.errors import FfbarError, InvalidArgumentsError, NoArgumentsError
from ffbar.i18n import _, available_languages, setup_i18n
from ffbar.session import Session

HELP_FLAGS = ("-h", "--help")
VERSION_FLAGS = ("-v", "--version")


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting."""

    def error(self, message: str):  # type: ignore[override]
        raise InvalidArgumentsError(message)


def build_parser() -> argparse.ArgumentParser:
    """Build the wrapper's own option parser."""
    parser = _ArgumentParser(
        prog="ffbar",
        usage="%(prog)s [options] [ffmpeg options]",
        description=_("Run ffmpeg with a single-line progress bar."),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
        epilog=_(
            """
  -h, --help             show this help and exit
  -v, --version          print version and exit

All other options are passed directly to ffmpeg.

Examples:
  %(prog)s -i movie.mkv -c:v libx264 movie.mp4
  %(prog)s --no-stats --bar-width 40 -i in.wav out.flac
  %(prog)s --json-progress -i in.mov out.webm
"""
        ),
    )

    display_group = parser.add_argument_group(_("Display"))
    display_group.add_argument(
        "--no-stats", action="store_false", dest="stats", default=True, help=_("Only show bar and percent")
    )
    display_group.add_argument("--bar-width", type=int, default=None, metavar="N", help=_("Bar cells (default: 20)"))
    display_group.add_argument(
        "--json-progress", action="store_true", default=False, help=_("Emit JSON lines instead of a bar")
    )

    debug_group = parser.add_argument_group(_("Debug"))
    debug_group.add_argument("--debug", action="store_true", default=False, help=_("Print the ffmpeg command"))
    debug_group.add_argument(
        "--save-log", action="store_true", default=False, help=_("Keep ffmpeg's raw output in the log directory")
    )

    i18n_group = parser.add_argument_group(_("Internationalization"))
    i18n_group.add_argument(
        "--lang", choices=available_languages(), default=None, help=_("Force language (default: auto-detect)")
    )
    return parser


def parse_args(args: List[str]) -> Tuple[Config, List[str], Set[str]]:
    """
    Split argv into wrapper config and ffmpeg arguments.

    Returns:
        (config, ffmpeg arguments, names of Config fields set on the CLI)
    """
    parser = build_parser()
    parsed_args, ffmpeg_args = parser.parse_known_args(args)

    cfg = Config()
    explicit: Set[str] = set()
    if not parsed_args.stats:
        cfg.stats = False
        explicit.add("stats")
    if parsed_args.bar_width is not None:
        cfg.bar_width = parsed_args.bar_width
        explicit.add("bar_width")
    if parsed_args.json_progress:
        cfg.json_progress = True
        explicit.add("json_progress")
    if parsed_args.save_log:
        cfg.save_log = True
        explicit.add("save_log")
    if parsed_args.lang:
        cfg.lang = parsed_args.lang
        explicit.add("lang")
    cfg.debug = parsed_args.debug

    return cfg, ffmpeg_args, explicit


def _validate(cfg: Config) -> None:
    """Check values that may have come from a config file."""
    try:
        cfg.bar_width = int(cfg.bar_width)
    except (TypeError, ValueError):
        raise InvalidArgumentsError(f"bar_width: {cfg.bar_width!r}") from None
    if cfg.bar_width < 0:
        raise InvalidArgumentsError(f"bar_width: {cfg.bar_width}")


def _prepare_app_dirs() -> Optional[Dict[str, Path]]:
    """Create the XDG directories and the default config file.

    Returns None when the directories cannot be created; the run then
    continues on built-in defaults without a log file.
    """
    try:
        app_dirs = get_app_dirs()
    except OSError as e:
        print(f"Warning: Cannot create ffbar directories: {e}", file=sys.stderr)
        return None
    try:
        save_default_config(app_dirs["config"])
    except OSError as e:
        print(f"Warning: Cannot write default config: {e}", file=sys.stderr)
    return app_dirs


def run(argv: List[str]) -> int:
    """Handle one invocation; FfbarError propagates to main()."""
    if not argv:
        raise NoArgumentsError()

    if len(argv) == 1:
        if argv[0] in HELP_FLAGS:
            print(build_parser().format_help())
            return 0
        if argv[0] in VERSION_FLAGS:
            print(f"v{__version__}")
            return 0
        raise InvalidArgumentsError(argv[0])

    cfg, ffmpeg_args, explicit = parse_args(argv)
    if not ffmpeg_args:
        raise NoArgumentsError()

    app_dirs = _prepare_app_dirs()
    if app_dirs is not None:
        file_config = load_config_file(app_dirs["config"])
        if file_config:
            apply_config_to_args(file_config, cfg, explicit)
    _validate(cfg)

    if cfg.lang:
        setup_i18n(cfg.lang)

    log_path = None
    if cfg.save_log and app_dirs is not None:
        log_path = get_log_path(app_dirs["logs"])
    result = Session(cfg, log_path=log_path).run(ffmpeg_args)

    if not result.success and result.log_path is not None:
        print(f"{_('ffmpeg output saved to')} {result.log_path}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    setup_i18n()
    args = sys.argv[1:] if argv is None else list(argv)

    try:
        return run(args)
    except FfbarError as e:
        print(e.message, file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print(f"\n{_('Interrupted')}", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
