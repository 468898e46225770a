"""
Run lifecycle for ffbar.

A Session spawns ffmpeg, feeds its stderr through a segmenter, folds each
unit into the progress state and hands the result to a renderer. When
ffmpeg exits it prints the completion or failure line.
"""

import shlex
import subprocess
import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional

from ffbar.config import Config
from ffbar.errors import BinaryNotFoundError, SpawnError
from ffbar.fields import extract_fields
from ffbar.json_progress import JSONRenderer
from ffbar.metrics import Phase, ProgressState, advance, average_throughput, rebase
from ffbar.segmenter import Segmenter, UnitKind, classify_unit, get_segmenter, next_phase, prompt_fragment, read_available
from ffbar.ui.terminal import Renderer, TerminalRenderer


@dataclass
class RunResult:
    """Outcome of one ffmpeg run."""

    success: bool
    returncode: Optional[int]
    elapsed_secs: float
    total_kb: float
    throughput: float
    log_path: Optional[Path] = None


class _TeeStream:
    """Readable wrapper copying every chunk read to a binary sink."""

    def __init__(self, stream: BinaryIO, sink: BinaryIO):
        self.stream = stream
        self.sink = sink

    def read1(self, size: int = -1) -> bytes:
        data = read_available(self.stream, size)
        if data:
            self.sink.write(data)
            self.sink.flush()
        return data

    read = read1


def make_renderer(cfg: Config) -> Renderer:
    """Pick the renderer matching the config."""
    if cfg.json_progress:
        return JSONRenderer()
    return TerminalRenderer(bar_width=cfg.bar_width, stats=cfg.stats)


class Session:
    """One monitored ffmpeg run."""

    def __init__(
        self,
        cfg: Optional[Config] = None,
        renderer: Optional[Renderer] = None,
        segmenter: Optional[Segmenter] = None,
        clock: Callable[[], float] = time.time,
        log_path: Optional[Path] = None,
    ):
        self.cfg = cfg or Config()
        self.renderer = renderer or make_renderer(self.cfg)
        self.segmenter = segmenter or get_segmenter(self.cfg.segmenter)
        self.clock = clock
        self.log_path = log_path
        self.state = ProgressState.start(self.clock())

    def spawn(self, args: List[str]) -> subprocess.Popen:
        """
        Start ffmpeg with stderr piped; stdin and stdout are inherited.

        Raises:
            BinaryNotFoundError: The binary is not on PATH.
            SpawnError: Any other OS-level failure to start it.
        """
        cmd = self.cfg.ffmpeg_command(args)
        if self.cfg.debug:
            print(f"[debug] {shlex.join(cmd)}", file=sys.stderr, flush=True)
        try:
            return subprocess.Popen(cmd, stderr=subprocess.PIPE)
        except FileNotFoundError:
            raise BinaryNotFoundError(self.cfg.ffmpeg_bin) from None
        except OSError as e:
            raise SpawnError(str(e)) from e

    def begin(self) -> None:
        """Reset the state and show the 0% placeholder."""
        self.state = ProgressState.start(self.clock())
        self.renderer.start(self.state)

    def handle_unit(self, unit: str) -> None:
        """Route one unit to the prompt relay or the progress pipeline."""
        kind = classify_unit(unit)
        phase = next_phase(self.state.phase, kind)

        if kind is UnitKind.PROMPT:
            self.state = replace(self.state, phase=phase)
            self.renderer.prompt(prompt_fragment(unit))
            return

        now = self.clock()
        state = replace(self.state, phase=phase)
        if phase is Phase.JUST_RESUMED:
            # Time spent waiting on the user must not count as run time.
            state = rebase(state, now)
        self.state = advance(state, extract_fields(unit), now)
        self.renderer.progress(self.state)

    def monitor(self, stream: BinaryIO) -> None:
        """Consume a diagnostic stream until EOF."""
        self.begin()
        for unit in self.segmenter.units(stream):
            self.handle_unit(unit)

    def finish(self, returncode: Optional[int]) -> RunResult:
        """Print the final line and return the run's aggregate figures."""
        elapsed = self.clock() - self.state.run_start_time
        throughput = average_throughput(self.state.current_bytes, elapsed)
        success = returncode == 0

        if success:
            self.renderer.summary(self.state, elapsed, throughput)
        else:
            self.renderer.failure(self.state, elapsed)

        return RunResult(
            success=success,
            returncode=returncode,
            elapsed_secs=elapsed,
            total_kb=self.state.current_bytes,
            throughput=throughput,
            log_path=self.log_path,
        )

    def _monitor_process(self, proc: subprocess.Popen) -> None:
        assert proc.stderr is not None
        if self.log_path is None:
            self.monitor(proc.stderr)
            return
        with self.log_path.open("wb") as sink:
            self.monitor(_TeeStream(proc.stderr, sink))

    def run(self, args: List[str]) -> RunResult:
        """Spawn ffmpeg with `args`, monitor it to completion and summarize."""
        proc = self.spawn(args)
        try:
            self._monitor_process(proc)
        except BaseException:
            if proc.poll() is None:
                proc.terminate()
            proc.wait()
            raise
        finally:
            if proc.stderr:
                proc.stderr.close()

        return self.finish(proc.wait())
