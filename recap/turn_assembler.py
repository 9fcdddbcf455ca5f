"""
Conversation assembly.

Word events from every speaker stream are merged onto one timeline and
grouped into speaker turns.  A turn ends when the speaker changes or when
the same speaker stays silent for longer than the silence threshold.

Usage::

    from recap.turn_assembler import assemble_turns, render_transcript

    turns = assemble_turns(hero_words + game_master_words)
    print(render_transcript(turns))
"""

from typing import Iterable, List

from .models import Turn, Word

DEFAULT_SILENCE_THRESHOLD = 7.0


def _is_duplicate(word: Word, previous: Word) -> bool:
    # Some recognisers emit the same word twice.
    return word.text == previous.text and word.start_time == previous.start_time


def assemble_turns(words: Iterable[Word], silence_threshold: float = DEFAULT_SILENCE_THRESHOLD) -> List[Turn]:
    """Merge word events from all speakers into ordered turns.

    Args:
        words: Word events from any number of speakers, in any order.
        silence_threshold: Largest gap in seconds between two words of the
            same speaker that still keeps them in one turn.

    Returns:
        Turns in start time order.  Empty input gives an empty list.
    """
    ordered = sorted(words, key=lambda w: w.start_time)
    if not ordered:
        return []

    turns: List[Turn] = []
    streak = [ordered[0]]
    last = ordered[0]
    for word in ordered[1:]:
        if _is_duplicate(word, last):
            continue
        same_speaker = word.speaker_id == last.speaker_id
        if not same_speaker or word.start_time - last.start_time > silence_threshold:
            turns.append(Turn(last.speaker_id, tuple(streak)))
            streak = []
        streak.append(word)
        last = word
    turns.append(Turn(last.speaker_id, tuple(streak)))
    return turns


def flatten_turns(turns: Iterable[Turn]) -> List[Word]:
    """Return the words of ``turns`` in conversation order."""
    return [word for turn in turns for word in turn.words]


def render_transcript(turns: Iterable[Turn]) -> str:
    """Render turns as ``speaker: words`` lines joined by newlines."""
    return "\n".join(str(turn) for turn in turns)
