"""
Word and turn types shared by the assembler and the partitioner.

Start times are plain ``float`` seconds relative to the start of the
speaker's own audio stream.  Recognisers hand offsets over in several
shapes (Google returns strings such as ``"1.500s"``), so :func:`make_word`
normalises and validates them before they reach the assembler.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Tuple, Union

from .errors import InvalidWordError

Offset = Union[float, int, str, timedelta]

_OFFSET_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)s?\s*$")


@dataclass(frozen=True)
class Word:
    speaker_id: str
    text: str
    start_time: float

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Turn:
    """A run of consecutive words from one speaker."""

    speaker_id: str
    words: Tuple[Word, ...]

    def __post_init__(self) -> None:
        if not self.words:
            raise ValueError("a turn needs at least one word")
        if any(w.speaker_id != self.speaker_id for w in self.words):
            raise ValueError(f"turn for {self.speaker_id!r} contains words of another speaker")

    @property
    def start_time(self) -> float:
        return self.words[0].start_time

    @property
    def end_time(self) -> float:
        return self.words[-1].start_time

    @property
    def text(self) -> str:
        return " ".join(w.text for w in self.words)

    def __str__(self) -> str:
        return f"{self.speaker_id}: {self.text}"


def parse_offset(value: Offset) -> float:
    """Convert a recogniser time offset to seconds.

    Accepts numbers (already seconds), :class:`datetime.timedelta` and
    protobuf duration strings such as ``"12.300s"``.

    Raises:
        InvalidWordError: If a string offset cannot be parsed.
    """
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, str):
        match = _OFFSET_RE.match(value)
        if not match:
            raise InvalidWordError(f"Unparseable time offset: {value!r}")
        return float(match.group(1))
    return float(value)


def make_word(speaker_id: str, text: str, start_time: Offset) -> Word:
    """Build a validated :class:`Word`.

    Raises:
        InvalidWordError: If the speaker id is empty or the start time is
            negative or not finite.
    """
    if not speaker_id or not speaker_id.strip():
        raise InvalidWordError("speaker id must not be empty")
    seconds = parse_offset(start_time)
    if not math.isfinite(seconds) or seconds < 0:
        raise InvalidWordError(f"invalid start time {start_time!r} for {speaker_id!r}")
    return Word(speaker_id=speaker_id, text=text, start_time=seconds)
