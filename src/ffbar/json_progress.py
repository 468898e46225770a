"""
JSON progress output for ffbar.

Emits one JSON object per line on stdout for integration with other
applications (web UIs, monitoring tools, etc.). Overwrite prompts are
still written verbatim to stderr so the user can answer them.
"""

import json
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, TextIO

from ffbar import __version__
from ffbar.metrics import ProgressState
from ffbar.ui.terminal import Renderer


@dataclass
class ProgressEvent:
    """Payload of a single JSON line."""

    event: str  # "start", "progress", "prompt", "complete", "failed"
    timestamp: float
    version: str = __version__
    progress_percent: Optional[float] = None
    current_time_secs: int = 0
    duration_secs: int = 0
    size_kb: float = 0.0
    estimated_total_kb: Optional[float] = None
    throughput_kb_s: Optional[float] = None
    speed: float = 0.0
    eta_seconds: Optional[float] = None
    elapsed_seconds: Optional[float] = None


def _event_from_state(event: str, state: ProgressState, **extra: Any) -> ProgressEvent:
    return ProgressEvent(
        event=event,
        timestamp=time.time(),
        progress_percent=state.percent,
        current_time_secs=state.current_time_secs,
        duration_secs=state.total_duration_secs,
        size_kb=state.current_bytes,
        estimated_total_kb=state.estimated_total_bytes,
        throughput_kb_s=state.bitrate,
        speed=state.speed_multiplier,
        eta_seconds=state.eta_secs,
        **extra,
    )


class JSONRenderer(Renderer):
    """Renderer that writes JSON lines instead of a progress bar."""

    def __init__(self, stream: Optional[TextIO] = None, prompt_stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.prompt_stream = prompt_stream if prompt_stream is not None else sys.stderr

    def _emit(self, payload: ProgressEvent, extra: Optional[Dict[str, Any]] = None) -> None:
        output = asdict(payload)
        if extra:
            output.update(extra)
        print(json.dumps(output), file=self.stream, flush=True)

    def start(self, state: ProgressState) -> None:
        payload = _event_from_state("start", state)
        payload.progress_percent = 0.0
        self._emit(payload)

    def progress(self, state: ProgressState) -> None:
        if not state.has_metrics:
            return
        self._emit(_event_from_state("progress", state))

    def prompt(self, fragment: str) -> None:
        self.prompt_stream.write(fragment)
        self.prompt_stream.flush()
        self._emit(ProgressEvent(event="prompt", timestamp=time.time()), {"text": fragment})

    def summary(self, state: ProgressState, elapsed_secs: float, throughput: float) -> None:
        payload = _event_from_state("complete", state, elapsed_seconds=elapsed_secs)
        payload.progress_percent = 100.0
        payload.throughput_kb_s = throughput
        payload.eta_seconds = 0.0
        self._emit(payload)

    def failure(self, state: ProgressState, elapsed_secs: float) -> None:
        self._emit(_event_from_state("failed", state, elapsed_seconds=elapsed_secs))
