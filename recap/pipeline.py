"""
Orchestration of a full conversation recap.

:func:`run` coordinates the steps:

* transcribe every speaker track concurrently,
* merge the words into speaker turns and render the transcript,
* store ``transcription.txt``,
* split the transcript into model-sized chunks,
* summarise the chunks and store ``summary.txt``.

A conversation without any turns (for example because every transcription
failed) stops with :class:`~recap.errors.NothingToSummarizeError` before
anything is sent to the language model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .config import RecapConfig
from .errors import NothingToSummarizeError
from .models import Turn, Word
from .stt_service import SpeechBackend
from .summarizer import Summarizer
from .transcription import SpeakerAudio, merge_word_lists, transcribe_speakers
from .turn_assembler import assemble_turns, render_transcript

logger = logging.getLogger(__name__)

TRANSCRIPT_FILE = "transcription.txt"
SUMMARY_FILE = "summary.txt"


@dataclass
class PipelineResult:
    turns: List[Turn]
    transcript: str
    chunks: List[str] = field(default_factory=list)
    summary: Optional[str] = None


def _store(output_dir: str, name: str, text: str) -> None:
    path = Path(output_dir) / name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not store %s: %s", path, exc)
        return
    logger.info("Saved %s", path)


def build_transcript(word_lists: Sequence[Sequence[Word]], config: RecapConfig) -> PipelineResult:
    """Assemble per-speaker word lists into turns and a rendered transcript."""
    turns = assemble_turns(merge_word_lists(word_lists), config.silence_threshold)
    logger.info("Assembled %d turns", len(turns))
    return PipelineResult(turns=turns, transcript=render_transcript(turns))


def run(
    requests: Sequence[SpeakerAudio],
    config: RecapConfig,
    *,
    backend=None,
    summarizer=None,
    summarise: bool = True,
) -> PipelineResult:
    """Produce the transcript and summary for a multi-track recording.

    Args:
        requests: One audio track per speaker.
        config: Pipeline configuration.
        backend: Object with a ``transcribe(SpeakerAudio)`` method; defaults
            to :class:`~recap.stt_service.SpeechBackend`.
        summarizer: Object with a ``summarise(chunks)`` method; defaults to
            :class:`~recap.summarizer.Summarizer`.
        summarise: Set to ``False`` to stop after the transcript.

    Raises:
        NothingToSummarizeError: If no speaker produced any words.
    """
    if backend is None:
        backend = SpeechBackend(config)
    word_lists = transcribe_speakers(requests, backend.transcribe, max_workers=config.max_workers)
    result = build_transcript(word_lists, config)
    _store(config.output_dir, TRANSCRIPT_FILE, result.transcript)
    if not result.turns:
        raise NothingToSummarizeError("no conversation detected, nothing to summarise")
    if not summarise:
        return result

    result.chunks = config.partitioner().partition(result.turns)
    logger.info("Split transcript into %d chunk(s)", len(result.chunks))
    if summarizer is None:
        summarizer = Summarizer(config)
    result.summary = summarizer.summarise(result.chunks)
    _store(config.output_dir, SUMMARY_FILE, result.summary)
    return result
