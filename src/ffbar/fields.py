"""
Field extraction from ffmpeg diagnostic text.

Only four signals are read from a unit:
- Duration: 00:01:30.00   (announced stream duration)
- time=00:00:10.00        (elapsed media time)
- speed=2.50x             (speed multiplier)
- size=    1234kB         (kilobytes written so far)

Each parser returns None when its field is absent from the unit.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ffbar.errors import UpstreamFormatError

DURATION_RE = re.compile(r"Duration: (\d{2}):(\d{2}):(\d{2})\.\d{2}")
TIME_RE = re.compile(r"time=(\d{2}):(\d{2}):(\d{2})\.\d{2}")
SPEED_RE = re.compile(r"speed=(\d+\.\d+)")
SIZE_RE = re.compile(r"size=\s*(\d+)")


def _to_int(field_name: str, text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise UpstreamFormatError(field_name, text) from None


def _to_float(field_name: str, text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise UpstreamFormatError(field_name, text) from None


def _hms_seconds(pattern: "re.Pattern[str]", field_name: str, unit: str) -> Optional[int]:
    m = pattern.search(unit)
    if not m:
        return None
    h, mi, s = (_to_int(field_name, g) for g in m.groups())
    return h * 3600 + mi * 60 + s


def parse_duration(unit: str) -> Optional[int]:
    """Return the announced media duration in whole seconds."""
    return _hms_seconds(DURATION_RE, "duration", unit)


def parse_time(unit: str) -> Optional[int]:
    """Return the elapsed media time in whole seconds."""
    return _hms_seconds(TIME_RE, "time", unit)


def parse_speed(unit: str) -> Optional[float]:
    """Return the speed multiplier relative to real time."""
    m = SPEED_RE.search(unit)
    if not m:
        return None
    return _to_float("speed", m.group(1))


def parse_size(unit: str) -> Optional[float]:
    """Return the output size in kilobytes, as ffmpeg reports it."""
    m = SIZE_RE.search(unit)
    if not m:
        return None
    return _to_float("size", m.group(1))


@dataclass(frozen=True)
class Fields:
    """Fields found in one unit. None means not present in this unit."""

    duration_secs: Optional[int] = None
    time_secs: Optional[int] = None
    speed: Optional[float] = None
    size_kb: Optional[float] = None

    def is_empty(self) -> bool:
        return self.duration_secs is None and self.time_secs is None and self.speed is None and self.size_kb is None


def extract_fields(unit: str) -> Fields:
    """
    Run every field parser against one unit.

    Args:
        unit: Decoded text of a single unit.

    Returns:
        Fields with any subset of values set.

    Raises:
        UpstreamFormatError: A field matched but its number did not parse.
    """
    return Fields(
        duration_secs=parse_duration(unit),
        time_secs=parse_time(unit),
        speed=parse_speed(unit),
        size_kb=parse_size(unit),
    )
