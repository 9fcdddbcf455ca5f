import pytest

import recap.pipeline as pipeline
from recap.config import RecapConfig
from recap.errors import NothingToSummarizeError
from recap.models import Word
from recap.transcription import SpeakerAudio

REQUESTS = [SpeakerAudio("Hero", "input/user1.flac"), SpeakerAudio("GameMaster", "input/user2.flac")]


class FakeBackend:
    def __init__(self, words_by_speaker, failing=()):
        self.words_by_speaker = words_by_speaker
        self.failing = set(failing)

    def transcribe(self, request):
        if request.speaker_id in self.failing:
            raise RuntimeError("recogniser unavailable")
        return [Word(request.speaker_id, text, start) for text, start in self.words_by_speaker.get(request.speaker_id, [])]


class FakeSummarizer:
    def __init__(self):
        self.chunks = None

    def summarise(self, chunks):
        self.chunks = list(chunks)
        return "The hero enters the tavern."


WORDS = {
    "Hero": [("I", 0.0), ("open", 0.4), ("the", 0.6), ("door", 0.9), ("again", 20.0)],
    "GameMaster": [("It", 2.0), ("creaks", 2.5)],
}


def make_config(tmp_path, **changes):
    return RecapConfig(output_dir=str(tmp_path), **changes)


def test_run_writes_transcript_and_summary(tmp_path):
    summarizer = FakeSummarizer()
    result = pipeline.run(REQUESTS, make_config(tmp_path), backend=FakeBackend(WORDS), summarizer=summarizer)

    expected = "Hero: I open the door\nGameMaster: It creaks\nHero: again"
    assert result.transcript == expected
    assert [t.speaker_id for t in result.turns] == ["Hero", "GameMaster", "Hero"]
    assert result.chunks == [expected]
    assert summarizer.chunks == [expected]
    assert (tmp_path / "transcription.txt").read_text(encoding="utf-8") == expected
    assert (tmp_path / "summary.txt").read_text(encoding="utf-8") == "The hero enters the tavern."


def test_run_splits_long_transcripts(tmp_path):
    config = make_config(tmp_path, budget_mode="chars", chunk_budget=35)
    result = pipeline.run(REQUESTS, config, backend=FakeBackend(WORDS), summarizer=FakeSummarizer())
    assert result.chunks == [
        "Hero: I open the door" + config.continuation_marker,
        "GameMaster: It creaks\nHero: again",
    ]


def test_failed_speaker_is_skipped(tmp_path):
    result = pipeline.run(
        REQUESTS, make_config(tmp_path), backend=FakeBackend(WORDS, failing={"Hero"}), summarizer=FakeSummarizer()
    )
    assert result.transcript == "GameMaster: It creaks"


def test_nothing_to_summarise_when_all_speakers_fail(tmp_path):
    summarizer = FakeSummarizer()
    with pytest.raises(NothingToSummarizeError):
        pipeline.run(
            REQUESTS,
            make_config(tmp_path),
            backend=FakeBackend(WORDS, failing={"Hero", "GameMaster"}),
            summarizer=summarizer,
        )
    assert summarizer.chunks is None
    assert (tmp_path / "transcription.txt").read_text(encoding="utf-8") == ""
    assert not (tmp_path / "summary.txt").exists()


def test_transcript_only(tmp_path):
    result = pipeline.run(REQUESTS, make_config(tmp_path), backend=FakeBackend(WORDS), summarise=False)
    assert result.summary is None
    assert result.chunks == []


def test_build_transcript_uses_silence_threshold():
    config = RecapConfig(silence_threshold=30)
    result = pipeline.build_transcript([[Word("Hero", "hi", 0.0), Word("Hero", "again", 20.0)]], config)
    assert result.transcript == "Hero: hi again"
