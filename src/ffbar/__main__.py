"""
Entry point for running ffbar as a module: python -m ffbar

    python -m ffbar -i movie.mkv movie.mp4
    python -m ffbar --help
"""

import sys

from ffbar.cli import main

if __name__ == "__main__":
    sys.exit(main())
