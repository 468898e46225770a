"""
Segmentation of ffmpeg's diagnostic stream into units.

With `-loglevel level` every message is prefixed with a tag such as
`[info]`, so splitting on the closing bracket yields roughly one status
group per unit. This is a heuristic: a unit may hold zero, one or several
fields of interest.

Also contains the overwrite-prompt detection and the phase transitions
that go with it.
"""

import re
from enum import Enum
from typing import BinaryIO, Iterator

from ffbar.errors import InvalidArgumentsError
from ffbar.metrics import Phase

PROMPT_MARKER = "already exists. Overwrite? [y/N"
_PROMPT_MARKER_BYTES = PROMPT_MARKER.encode()

DEFAULT_CHUNK_SIZE = 4096


class UnitKind(Enum):
    """Classification of a unit."""

    PROMPT = "prompt"
    PROGRESS = "progress"


def classify_unit(unit: str) -> UnitKind:
    """Return PROMPT if the unit carries the overwrite question."""
    if PROMPT_MARKER in unit:
        return UnitKind.PROMPT
    return UnitKind.PROGRESS


def prompt_fragment(unit: str) -> str:
    """
    Rebuild the prompt text the user should see.

    Keeps what follows the last newline. When the unit was cut at the
    prompt's own closing bracket, the bracket and trailing space are put
    back.
    """
    tail = unit.rpartition("\n")[2]
    if tail.endswith(PROMPT_MARKER):
        tail += "] "
    return tail


def next_phase(phase: Phase, kind: UnitKind) -> Phase:
    """
    Advance the prompt phase for a newly received unit.

    PARSING -> AWAITING_PROMPT_ANSWER on a prompt unit. The first progress
    unit after that is JUST_RESUMED (callers rebase their clocks there),
    and the one after is back to PARSING.
    """
    if kind is UnitKind.PROMPT:
        return Phase.AWAITING_PROMPT_ANSWER
    if phase is Phase.AWAITING_PROMPT_ANSWER:
        return Phase.JUST_RESUMED
    return Phase.PARSING


def read_available(stream: BinaryIO, size: int) -> bytes:
    """Read up to `size` bytes, returning early with whatever is buffered."""
    # read1 returns what is available instead of waiting for `size` bytes,
    # so a prompt is delivered while ffmpeg blocks on stdin.
    read1 = getattr(stream, "read1", None)
    if read1 is not None:
        return read1(size)
    return stream.read(size)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class Segmenter:
    """Splits a byte stream into text units."""

    name = "base"

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.chunk_size = chunk_size

    def units(self, stream: BinaryIO) -> Iterator[str]:
        raise NotImplementedError


class BracketSegmenter(Segmenter):
    """Split on a delimiter byte, `]` by default. The delimiter is dropped."""

    name = "bracket"

    def __init__(self, delimiter: bytes = b"]", chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(chunk_size)
        self.delimiter = delimiter

    def units(self, stream: BinaryIO) -> Iterator[str]:
        buf = b""
        while True:
            chunk = read_available(stream, self.chunk_size)
            if not chunk:
                break
            buf += chunk
            *complete, buf = buf.split(self.delimiter)
            for part in complete:
                yield _decode(part)
        if buf:
            yield _decode(buf)


class LineSegmenter(Segmenter):
    """
    Split on carriage returns and newlines.

    A pending partial line holding the prompt marker is flushed right away,
    since ffmpeg does not end the prompt with a newline.
    """

    name = "line"

    _BREAK = re.compile(rb"[\r\n]")

    def units(self, stream: BinaryIO) -> Iterator[str]:
        buf = b""
        while True:
            chunk = read_available(stream, self.chunk_size)
            if not chunk:
                break
            buf += chunk
            *complete, buf = self._BREAK.split(buf)
            for part in complete:
                if part:
                    yield _decode(part)
            if _PROMPT_MARKER_BYTES in buf:
                yield _decode(buf)
                buf = b""
        if buf:
            yield _decode(buf)


SEGMENTERS = {
    BracketSegmenter.name: BracketSegmenter,
    LineSegmenter.name: LineSegmenter,
}


def get_segmenter(name: str) -> Segmenter:
    """Look up a segmenter by its config name."""
    try:
        return SEGMENTERS[name]()
    except KeyError:
        raise InvalidArgumentsError(f"unknown segmenter: {name}") from None
