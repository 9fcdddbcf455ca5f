"""
Google Speech‑to‑Text backend.

Every speaker track is uploaded to Cloud Storage and recognised as a
separate long-running job.  Diarisation is not needed because each track
holds exactly one speaker; the speaker id is attached to every word of the
result instead.

Usage::

    from recap.config import RecapConfig
    from recap.stt_service import SpeechBackend
    from recap.transcription import SpeakerAudio

    backend = SpeechBackend(RecapConfig.from_env())
    words = backend.transcribe(SpeakerAudio("Hero", "input/user1.flac"))
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from google.cloud import speech_v1p1beta1 as speech
from google.cloud import storage
from google.protobuf.json_format import MessageToDict

from .audio_processor import discard, normalise_audio
from .config import RecapConfig
from .errors import ConfigurationError, InvalidWordError, PollTimeoutError, PollingError, RecognitionError
from .models import Word, make_word
from .polling import operation_state, poll
from .storage import upload_if_missing
from .transcription import SpeakerAudio

logger = logging.getLogger(__name__)


def words_from_response(response: Dict[str, Any], speaker_id: str) -> List[Word]:
    """Extract word events from a recognition response.

    Only the first (most probable) alternative of each result is used.
    Both the ``startTime`` field of the v1 API and the ``startOffset``
    field of the v2 API are understood.  A word that fails validation is
    logged and skipped; the rest of the track is kept.

    Args:
        response: The response converted with ``MessageToDict``.
        speaker_id: Speaker the track belongs to.

    Raises:
        RecognitionError: If a result carries an error status.
    """
    words: List[Word] = []
    for result in response.get("results", []):
        error = result.get("error")
        if error:
            raise RecognitionError(
                f"could not transcribe. {error.get('message', '')} - status {error.get('code')}"
            )
        alternatives = result.get("alternatives", [])
        if not alternatives:
            continue
        for info in alternatives[0].get("words", []):
            text = info.get("word")
            if not text:
                continue
            offset = info.get("startTime", info.get("startOffset", "0s"))
            try:
                words.append(make_word(speaker_id, text, offset))
            except InvalidWordError as exc:
                logger.warning("Skipping word %r of speaker %s: %s", text, speaker_id, exc)
    return words


class SpeechBackend:
    """Transcribe speaker tracks with Google Speech‑to‑Text.

    Clients are created from the configuration unless supplied, which lets
    tests inject fakes.
    """

    def __init__(
        self,
        config: RecapConfig,
        speech_client: Optional[Any] = None,
        storage_client: Optional[Any] = None,
    ) -> None:
        if not config.bucket_name:
            raise ConfigurationError("RECAP_BUCKET must be set to upload audio for transcription")
        self.config = config
        if speech_client is None:
            options = {"api_endpoint": config.speech_endpoint} if config.speech_endpoint else None
            speech_client = speech.SpeechClient(client_options=options)
        self.speech_client = speech_client
        self.storage_client = storage_client if storage_client is not None else storage.Client()

    def _recognition_config(self) -> speech.RecognitionConfig:
        settings = dict(
            language_code=self.config.language_code,
            enable_word_time_offsets=True,
            enable_automatic_punctuation=True,
        )
        if self.config.convert_audio:
            settings["encoding"] = speech.RecognitionConfig.AudioEncoding.LINEAR16
            settings["sample_rate_hertz"] = self.config.sample_rate
        return speech.RecognitionConfig(**settings)

    def recognize(self, gcs_uri: str) -> Dict[str, Any]:
        """Run a long-running recognition job and return the response dict."""
        audio = speech.RecognitionAudio(uri=gcs_uri)
        logger.info("Starting STT job for %s", gcs_uri)
        operation = self.speech_client.long_running_recognize(config=self._recognition_config(), audio=audio)
        try:
            poll(
                lambda: operation_state(operation),
                interval=self.config.poll_interval,
                max_interval=self.config.poll_max_interval,
                attempts=self.config.poll_attempts,
                description=f"STT job for {gcs_uri}",
            )
        except PollTimeoutError:
            raise
        except PollingError as exc:
            raise RecognitionError(f"STT job for {gcs_uri} failed: {operation.exception()}") from exc
        response = operation.result()
        logger.info("STT job complete for %s", gcs_uri)
        return MessageToDict(response._pb)

    def transcribe(self, request: SpeakerAudio) -> List[Word]:
        """Upload and recognise one speaker track."""
        converted = None
        try:
            upload_path = request.path
            if self.config.convert_audio:
                converted = normalise_audio(request.path, sample_rate=self.config.sample_rate)
                upload_path = converted
            object_name = f"{self.config.upload_prefix}{request.speaker_id}{Path(upload_path).suffix.lower()}"
            gcs_uri = upload_if_missing(self.storage_client, self.config.bucket_name, object_name, upload_path)
            response = self.recognize(gcs_uri)
        finally:
            discard(converted)
        return words_from_response(response, request.speaker_id)
