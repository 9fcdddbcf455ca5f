from datetime import timedelta

import pytest

from recap.errors import InvalidWordError
from recap.models import Turn, Word, make_word, parse_offset


def test_parse_offset():
    assert parse_offset("1.500s") == 1.5
    assert parse_offset("0s") == 0.0
    assert parse_offset("12s") == 12.0
    assert parse_offset(timedelta(seconds=3, milliseconds=250)) == 3.25
    assert parse_offset(4) == 4.0


def test_parse_offset_rejects_garbage():
    with pytest.raises(InvalidWordError):
        parse_offset("soon")


def test_make_word_normalises_offset():
    assert make_word("Hero", "hello", "2.100s") == Word("Hero", "hello", 2.1)


@pytest.mark.parametrize(
    "speaker, start",
    [("", 1.0), ("   ", 1.0), ("Hero", -0.5), ("Hero", float("nan")), ("Hero", float("inf")), ("Hero", "-1s")],
)
def test_make_word_rejects_malformed_events(speaker, start):
    with pytest.raises(InvalidWordError):
        make_word(speaker, "word", start)


def test_invalid_word_error_is_a_value_error():
    with pytest.raises(ValueError):
        make_word("", "word", 0)


def test_turn_properties():
    turn = Turn("Hero", (Word("Hero", "roll", 1.0), Word("Hero", "initiative", 1.4)))
    assert turn.start_time == 1.0
    assert turn.end_time == 1.4
    assert str(turn) == "Hero: roll initiative"


def test_turn_requires_words_of_one_speaker():
    with pytest.raises(ValueError):
        Turn("Hero", ())
    with pytest.raises(ValueError):
        Turn("Hero", (Word("Hero", "a", 0.0), Word("GameMaster", "b", 1.0)))
