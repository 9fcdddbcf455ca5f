"""
Exception types raised by the recap pipeline.

The pure assembly and chunking functions never raise for well-formed input;
everything here originates at the boundary (ingestion, configuration or the
external services around the core).
"""


class RecapError(Exception):
    """Base class for all pipeline errors."""


class InvalidWordError(RecapError, ValueError):
    """A word event failed validation at ingestion."""


class ConfigurationError(RecapError, ValueError):
    """The pipeline configuration is unusable."""


class RecognitionError(RecapError):
    """The speech recogniser reported an error for a result."""


class PollingError(RecapError):
    """A polled job finished in a failure or unrecognised state."""


class PollTimeoutError(PollingError):
    """A polled job did not finish within the retry budget."""


class SummarizationError(RecapError):
    """The language model failed to produce a summary."""


class NothingToSummarizeError(RecapError):
    """The assembled conversation contains no turns."""
