"""
Progress metrics for ffbar.

Contains:
- ProgressState, an immutable snapshot replaced once per unit
- advance(), the pure per-unit update step
- Human-readable size and duration formatting
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ffbar.fields import Fields


class Phase(Enum):
    """Where the monitor stands with respect to the overwrite prompt."""

    PARSING = "parsing"
    AWAITING_PROMPT_ANSWER = "awaiting_prompt_answer"
    JUST_RESUMED = "just_resumed"


@dataclass(frozen=True)
class ProgressState:
    """Snapshot of one run's progress. Sizes are in kilobytes."""

    run_start_time: float
    last_sample_time: float
    total_duration_secs: int = 0
    current_time_secs: int = 0
    current_bytes: float = 0.0
    previous_bytes: float = 0.0
    speed_multiplier: float = 0.0
    phase: Phase = Phase.PARSING

    # Derived, None until computable
    percent: Optional[float] = None
    estimated_total_bytes: Optional[float] = None
    bitrate: Optional[float] = None
    eta_secs: Optional[float] = None

    @classmethod
    def start(cls, now: float) -> "ProgressState":
        """Create the state for a run starting at `now`."""
        return cls(run_start_time=now, last_sample_time=now)

    @property
    def has_metrics(self) -> bool:
        return self.percent is not None


def _clear_derived(state: ProgressState) -> ProgressState:
    return replace(state, percent=None, estimated_total_bytes=None, bitrate=None, eta_secs=None)


def advance(state: ProgressState, fields: Fields, now: float) -> ProgressState:
    """
    Fold one unit's fields into the state.

    Derived metrics are only computed when both the media duration and a
    non-zero elapsed time are known. The sample anchors (last_sample_time,
    previous_bytes) move only when metrics were computed.

    Args:
        state: State before this unit.
        fields: Fields extracted from this unit.
        now: Wall-clock time of this unit.

    Returns:
        New ProgressState.
    """
    duration = state.total_duration_secs
    if duration == 0 and fields.duration_secs:
        duration = fields.duration_secs

    time_secs = fields.time_secs or 0
    speed = state.speed_multiplier if fields.speed is None else fields.speed
    current = state.current_bytes if fields.size_kb is None else fields.size_kb

    nxt = replace(
        state,
        total_duration_secs=duration,
        current_time_secs=time_secs,
        speed_multiplier=speed,
        current_bytes=current,
    )

    if duration == 0 or time_secs == 0:
        return _clear_derived(nxt)

    percent = time_secs * 100 / duration
    estimated = current * 100 / percent if percent else None

    interval = now - state.last_sample_time
    bitrate = (current - state.previous_bytes) / interval if interval > 0 else None

    eta = (duration - time_secs) / speed if speed else None

    return replace(
        nxt,
        percent=percent,
        estimated_total_bytes=estimated,
        bitrate=bitrate,
        eta_secs=eta,
        last_sample_time=now,
        previous_bytes=current,
    )


def rebase(state: ProgressState, now: float) -> ProgressState:
    """Move both wall-clock anchors to `now`, dropping derived metrics."""
    return _clear_derived(replace(state, run_start_time=now, last_sample_time=now))


def average_throughput(total_kb: float, elapsed_secs: float) -> float:
    """Average kilobytes per second over a run."""
    if elapsed_secs <= 0:
        return 0.0
    return total_kb / elapsed_secs


# -------------------- FORMATTING --------------------


def human_readable(kb: float) -> str:
    """Format a kilobyte count with decimal (1000-based) scaling."""
    if kb > 1_000_000:
        return f"{kb / 1_000_000:.1f}GB"
    if kb > 1000:
        return f"{kb / 1000:.1f}MB"
    return f"{kb:.1f}KB"


def secs_to_time(secs: float) -> str:
    """
    Format a duration for the progress line.

    Over an hour: "<H>h <M>m" where M is the leftover seconds times 60,
    clamped to 59. Over a minute: "<M>m <S>s". Otherwise "<S>s".
    """
    if secs > 3600:
        minutes = min(secs % 3600 * 60, 59)
        return f"{int(secs // 3600)}h {minutes:.0f}m"
    if secs > 60:
        seconds = min(secs % 60, 59)
        return f"{int(secs // 60)}m {seconds:.0f}s"
    return f"{secs:.0f}s"
