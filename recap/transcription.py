"""
Per-speaker transcription fan-out.

Each speaker is recorded on a separate track and transcribed by its own
worker.  Workers share nothing; every worker fills its own result slot and
the slots are collected once all of them have finished.  A worker that
fails contributes no words instead of aborting the whole conversation.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Sequence

from .models import Word

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeakerAudio:
    speaker_id: str
    path: str


Transcriber = Callable[[SpeakerAudio], List[Word]]


def _transcribe_or_empty(transcribe: Transcriber, request: SpeakerAudio) -> List[Word]:
    try:
        words = transcribe(request)
    except Exception:
        logger.exception("Could not transcribe %s for speaker %s", request.path, request.speaker_id)
        return []
    logger.info("Speaker %s: %d words", request.speaker_id, len(words))
    return list(words)


def transcribe_speakers(
    requests: Sequence[SpeakerAudio],
    transcribe: Transcriber,
    *,
    max_workers: int = 4,
) -> List[List[Word]]:
    """Transcribe all speakers concurrently.

    Args:
        requests: One entry per speaker track.
        transcribe: Turns one track into its word events.
        max_workers: Upper bound on concurrently running workers.

    Returns:
        One word list per request, in request order.  Failed speakers yield
        an empty list.
    """
    if not requests:
        return []
    workers = min(max_workers, len(requests))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="transcribe") as pool:
        futures = [pool.submit(_transcribe_or_empty, transcribe, request) for request in requests]
        return [future.result() for future in futures]


def merge_word_lists(word_lists: Sequence[Sequence[Word]]) -> List[Word]:
    """Concatenate the per-speaker result slots."""
    return [word for words in word_lists for word in words]
