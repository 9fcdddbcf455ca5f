import threading

from recap.models import Word
from recap.transcription import SpeakerAudio, merge_word_lists, transcribe_speakers


def test_results_follow_request_order():
    requests = [SpeakerAudio("Hero", "a.flac"), SpeakerAudio("GameMaster", "b.flac")]

    def transcribe(request):
        return [Word(request.speaker_id, "hello", 1.0)]

    slots = transcribe_speakers(requests, transcribe)
    assert [slot[0].speaker_id for slot in slots] == ["Hero", "GameMaster"]


def test_failed_speaker_contributes_no_words():
    requests = [SpeakerAudio("Hero", "a.flac"), SpeakerAudio("GameMaster", "b.flac")]

    def transcribe(request):
        if request.speaker_id == "Hero":
            raise RuntimeError("upload failed")
        return [Word("GameMaster", "welcome", 0.0)]

    slots = transcribe_speakers(requests, transcribe)
    assert slots == [[], [Word("GameMaster", "welcome", 0.0)]]
    assert merge_word_lists(slots) == [Word("GameMaster", "welcome", 0.0)]


def test_speakers_run_concurrently():
    requests = [SpeakerAudio(f"S{i}", f"{i}.flac") for i in range(3)]
    barrier = threading.Barrier(3, timeout=5)

    def transcribe(request):
        barrier.wait()
        return [Word(request.speaker_id, "ok", 0.0)]

    slots = transcribe_speakers(requests, transcribe, max_workers=3)
    assert all(len(slot) == 1 for slot in slots)


def test_no_requests():
    assert transcribe_speakers([], lambda request: []) == []
