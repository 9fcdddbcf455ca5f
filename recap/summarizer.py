"""
Conversation summarisation with Gemini.

Chunks are sent one after another into a single chat session, so the model
sees the whole conversation before it answers.  Every chunk but the last
ends with the continuation marker; the system instruction tells the model to
hold its summary until a message arrives without it.  The reply to the last
chunk is the summary.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as api_exceptions
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import RecapConfig
from .errors import ConfigurationError, NothingToSummarizeError, SummarizationError

logger = logging.getLogger(__name__)

# Raised by the client when the prompt or the reply is blocked.
BLOCKED_ERRORS = (genai.types.BlockedPromptException, genai.types.StopCandidateException)

TRANSIENT_ERRORS = (
    api_exceptions.ResourceExhausted,
    api_exceptions.ServiceUnavailable,
    api_exceptions.DeadlineExceeded,
    api_exceptions.InternalServerError,
)


def _build_model(config: RecapConfig):
    if not config.genai_api_key:
        raise ConfigurationError("GENAI_API_KEY must be set for summarisation")
    genai.configure(api_key=config.genai_api_key)
    return genai.GenerativeModel(
        config.genai_model,
        system_instruction=config.system_instruction,
        generation_config={
            "temperature": config.temperature,
            "max_output_tokens": config.max_output_tokens,
        },
    )


class Summarizer:
    def __init__(self, config: RecapConfig, model: Optional[Any] = None) -> None:
        self.config = config
        self.model = model if model is not None else _build_model(config)

    def _send(self, chat, text: str):
        retrying = Retrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            wait=wait_exponential(multiplier=self.config.poll_interval, max=self.config.poll_max_interval),
            stop=stop_after_attempt(self.config.request_attempts),
            reraise=True,
        )
        return retrying(chat.send_message, text)

    def summarise(self, chunks: Sequence[str]) -> str:
        """Submit ``chunks`` in order and return the model's final answer.

        Raises:
            NothingToSummarizeError: If ``chunks`` is empty.
            SummarizationError: If the model call fails or returns no text.
        """
        if not chunks:
            raise NothingToSummarizeError("no transcript chunks to summarise")
        chat = self.model.start_chat()
        response = None
        for index, chunk in enumerate(chunks, start=1):
            logger.info("Sending chunk %d/%d to %s", index, len(chunks), self.config.genai_model)
            try:
                response = self._send(chat, chunk)
            except (api_exceptions.GoogleAPIError, *BLOCKED_ERRORS) as exc:
                raise SummarizationError(f"summarisation failed on chunk {index}/{len(chunks)}: {exc}") from exc
        try:
            summary = response.text.strip()
        except ValueError as exc:
            # Raised by the client when the reply was blocked or has no parts.
            raise SummarizationError(f"model returned no text: {exc}") from exc
        if not summary:
            raise SummarizationError("model returned an empty summary")
        return summary
