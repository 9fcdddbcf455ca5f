"""
Pipeline configuration.

All settings live on a single :class:`RecapConfig` that is created once per
process and passed to every component that needs it.  ``from_env`` reads the
values from environment variables:

* ``RECAP_BUCKET`` – Cloud Storage bucket used for audio uploads (required
  for transcription).
* ``RECAP_UPLOAD_PREFIX`` – Object prefix for uploaded audio.
* ``RECAP_LANGUAGE_CODE`` – BCP‑47 language tag for the recogniser.
* ``RECAP_SPEECH_ENDPOINT`` – Regional Speech‑to‑Text endpoint.
* ``RECAP_CONVERT_AUDIO`` – Set to ``false`` to upload audio unchanged.
* ``GENAI_API_KEY`` / ``GENAI_MODEL`` / ``SUMMARISER_PROMPT`` – Gemini
  settings for summarisation.
* ``GENAI_TEMPERATURE`` / ``GENAI_MAX_OUTPUT_TOKENS`` – Generation settings.
* ``RECAP_SILENCE_THRESHOLD`` – Seconds of silence that end a turn.
* ``RECAP_BUDGET_MODE`` – ``tokens`` or ``chars``.
* ``RECAP_CHUNK_BUDGET`` – Budget per chunk in the selected unit.
* ``RECAP_TOKEN_WEIGHT`` / ``RECAP_TOKEN_OVERHEAD`` – Token estimate.
* ``RECAP_POLL_INTERVAL`` / ``RECAP_POLL_MAX_INTERVAL`` /
  ``RECAP_POLL_ATTEMPTS`` – Backoff for recognition jobs.
* ``RECAP_REQUEST_ATTEMPTS`` – Attempts per model request.
* ``RECAP_MAX_WORKERS`` – Concurrent transcription workers.
* ``RECAP_OUTPUT_DIR`` – Directory for ``transcription.txt`` and
  ``summary.txt``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .chunker import DEFAULT_CONTINUATION_MARKER, ChunkPartitioner, CharacterCost, TokenEstimate
from .errors import ConfigurationError
from .turn_assembler import DEFAULT_SILENCE_THRESHOLD

BUDGET_MODES = ("tokens", "chars")

DEFAULT_PROMPT = (
    "You are an expert meeting summariser.  You will receive the transcript "
    "of a conversation, one line per speaker turn in the form "
    "'speaker: words'.  Long transcripts arrive in several messages; a "
    "message ending with '{marker}' is followed by more transcript, so reply "
    "only with a short acknowledgement until a message arrives without it.  "
    "Then summarise the whole conversation including:\n"
    "• An executive summary of key points\n"
    "• What each speaker contributed\n"
    "• A list of action items and follow‑ups\n"
    "Use bullet points and keep the summary under 400 words."
)


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RecapConfig:
    bucket_name: Optional[str] = None
    upload_prefix: str = "audio-files/"
    language_code: str = "en-US"
    speech_endpoint: Optional[str] = None
    sample_rate: int = 16_000
    convert_audio: bool = True

    genai_api_key: Optional[str] = field(default=None, repr=False)
    genai_model: str = "models/gemini-1.5-pro"
    summariser_prompt: str = DEFAULT_PROMPT
    temperature: float = 0.4
    max_output_tokens: int = 2048

    silence_threshold: float = DEFAULT_SILENCE_THRESHOLD
    budget_mode: str = "tokens"
    chunk_budget: float = 122_000
    token_weight: float = 1.5
    token_overhead: float = 4.0
    continuation_marker: str = DEFAULT_CONTINUATION_MARKER

    poll_interval: float = 3.0
    poll_max_interval: float = 30.0
    poll_attempts: int = 200
    request_attempts: int = 3
    max_workers: int = 4

    output_dir: str = "."

    def __post_init__(self) -> None:
        if self.silence_threshold < 0:
            raise ConfigurationError(f"silence threshold must not be negative: {self.silence_threshold}")
        if self.budget_mode not in BUDGET_MODES:
            raise ConfigurationError(f"budget mode must be one of {BUDGET_MODES}, got {self.budget_mode!r}")
        if self.chunk_budget <= 0:
            raise ConfigurationError(f"chunk budget must be positive: {self.chunk_budget}")
        if self.token_weight <= 0 or self.token_overhead < 0:
            raise ConfigurationError("token weight must be positive and overhead non-negative")
        if self.poll_interval < 0 or self.poll_attempts < 1 or self.request_attempts < 1:
            raise ConfigurationError("polling needs a non-negative interval and at least one attempt")
        if self.poll_max_interval < self.poll_interval:
            raise ConfigurationError(
                f"poll_max_interval ({self.poll_max_interval}) must not be below poll_interval ({self.poll_interval})"
            )
        if self.max_output_tokens < 1:
            raise ConfigurationError(f"max_output_tokens must be at least 1: {self.max_output_tokens}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1: {self.max_workers}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RecapConfig":
        """Build a configuration from environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a value is malformed or out of range.
        """
        env = os.environ if environ is None else environ
        values = {}
        text_fields = {
            "RECAP_BUCKET": "bucket_name",
            "RECAP_UPLOAD_PREFIX": "upload_prefix",
            "RECAP_LANGUAGE_CODE": "language_code",
            "RECAP_SPEECH_ENDPOINT": "speech_endpoint",
            "GENAI_API_KEY": "genai_api_key",
            "GENAI_MODEL": "genai_model",
            "SUMMARISER_PROMPT": "summariser_prompt",
            "RECAP_BUDGET_MODE": "budget_mode",
            "RECAP_CONTINUATION_MARKER": "continuation_marker",
            "RECAP_OUTPUT_DIR": "output_dir",
        }
        number_fields = {
            "RECAP_SAMPLE_RATE": ("sample_rate", int),
            "RECAP_SILENCE_THRESHOLD": ("silence_threshold", float),
            "RECAP_CHUNK_BUDGET": ("chunk_budget", float),
            "RECAP_TOKEN_WEIGHT": ("token_weight", float),
            "RECAP_TOKEN_OVERHEAD": ("token_overhead", float),
            "RECAP_POLL_INTERVAL": ("poll_interval", float),
            "RECAP_POLL_MAX_INTERVAL": ("poll_max_interval", float),
            "RECAP_POLL_ATTEMPTS": ("poll_attempts", int),
            "RECAP_REQUEST_ATTEMPTS": ("request_attempts", int),
            "GENAI_TEMPERATURE": ("temperature", float),
            "GENAI_MAX_OUTPUT_TOKENS": ("max_output_tokens", int),
            "RECAP_MAX_WORKERS": ("max_workers", int),
        }
        for name, attr in text_fields.items():
            if env.get(name):
                values[attr] = env[name]
        for name, (attr, kind) in number_fields.items():
            if env.get(name):
                try:
                    values[attr] = kind(env[name])
                except ValueError as exc:
                    raise ConfigurationError(f"{name} must be a number, got {env[name]!r}") from exc
        if env.get("RECAP_CONVERT_AUDIO"):
            values["convert_audio"] = _flag(env["RECAP_CONVERT_AUDIO"])
        return cls(**values)

    def with_overrides(self, **changes) -> "RecapConfig":
        return replace(self, **changes)

    def partitioner(self) -> ChunkPartitioner:
        """Return the chunk partitioner described by this configuration."""
        if self.budget_mode == "tokens":
            cost_model = TokenEstimate(self.token_weight, self.token_overhead)
        else:
            cost_model = CharacterCost()
        return ChunkPartitioner(self.chunk_budget, cost_model, continuation_marker=self.continuation_marker)

    @property
    def system_instruction(self) -> str:
        return self.summariser_prompt.replace("{marker}", self.continuation_marker.strip())
