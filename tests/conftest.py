"""
Pytest configuration and shared fixtures for ffbar tests.
"""

import io
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, secs: float) -> None:
        self.now += secs


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def out() -> io.StringIO:
    """Capture buffer for renderer output."""
    return io.StringIO()


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    """Keep output plain and in English."""
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("FFBAR_LANG", "en")
    monkeypatch.delenv("FFBAR_BIN", raising=False)

    from ffbar.i18n import setup_i18n

    setup_i18n("en")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_dir(temp_dir: Path) -> Path:
    """Create a temporary config directory."""
    config_dir = temp_dir / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def mock_xdg_dirs(temp_dir: Path, monkeypatch):
    """Mock XDG directories to use temporary paths."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(temp_dir / "state"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(temp_dir / "cache"))


@pytest.fixture
def default_config():
    """Return a default Config instance for testing."""
    from ffbar.config import Config

    return Config()


@pytest.fixture
def ffmpeg_available():
    """Skip the test when ffmpeg is not installed."""
    if not shutil.which("ffmpeg"):
        pytest.skip("ffmpeg not available")


# A trimmed `ffmpeg -loglevel level` transcript: header, two status
# updates and the final line.
SAMPLE_STDERR = (
    b"[info] Input #0, matroska,webm, from 'in.mkv':\n"
    b"[info]   Duration: 00:01:40.00, start: 0.000000, bitrate: 1000 kb/s\n"
    b"[info] Stream mapping:\n"
    b"[info] frame=  250 fps=50 q=28.0 size=     512kB time=00:00:10.00 bitrate= 419.4kbits/s speed=2.00x\r"
    b"[info] frame=  500 fps=50 q=28.0 size=    1024kB time=00:00:20.00 bitrate= 419.4kbits/s speed=2.00x\r"
    b"[info] frame= 2500 fps=50 q=-1.0 Lsize=    5000kB time=00:01:40.00 bitrate= 409.6kbits/s speed=2.00x\n"
)


@pytest.fixture
def sample_stderr() -> bytes:
    return SAMPLE_STDERR
