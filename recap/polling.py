"""
Bounded polling for asynchronous jobs.

Long-running recognition jobs finish on the service side; the client polls
until the job reaches a terminal state.  :func:`poll` backs off
exponentially between checks and gives up after a fixed number of attempts
instead of blocking forever.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable

from tenacity import RetryError, Retrying, retry_if_result, stop_after_attempt, wait_exponential

from .errors import PollingError, PollTimeoutError

logger = logging.getLogger(__name__)


class JobState(enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNKNOWN = "unknown"


def poll(
    check: Callable[[], Any],
    *,
    interval: float = 3.0,
    max_interval: float = 30.0,
    attempts: int = 200,
    description: str = "job",
) -> None:
    """Call ``check`` until it reports a terminal :class:`JobState`.

    Args:
        check: Returns the current state of the job.  Exceptions raised by
            ``check`` propagate immediately.
        interval: First wait in seconds; doubles after every pending check.
        max_interval: Upper bound for a single wait.
        attempts: Maximum number of calls to ``check``.
        description: Name of the job used in log and error messages.

    Raises:
        PollingError: If the job failed, reported :attr:`JobState.UNKNOWN`,
            or ``check`` returned something that is not a :class:`JobState`.
        PollTimeoutError: If the job was still pending after ``attempts``.
    """
    retrying = Retrying(
        retry=retry_if_result(lambda state: state is JobState.PENDING),
        wait=wait_exponential(multiplier=interval, max=max_interval),
        stop=stop_after_attempt(attempts),
        before_sleep=lambda rs: logger.debug("%s still pending after %d checks", description, rs.attempt_number),
    )
    try:
        state = retrying(check)
    except RetryError as exc:
        raise PollTimeoutError(f"{description} still pending after {attempts} checks") from exc
    if state is JobState.SUCCEEDED:
        logger.info("%s completed", description)
        return
    if state is JobState.FAILED:
        raise PollingError(f"{description} failed")
    if state is JobState.UNKNOWN:
        raise PollingError(f"{description} reported an unknown status")
    raise PollingError(f"{description} returned unrecognised state {state!r}")


def operation_state(operation) -> JobState:
    """Map a ``google.api_core`` long-running operation to a :class:`JobState`."""
    if not operation.done():
        return JobState.PENDING
    if operation.exception() is not None:
        return JobState.FAILED
    return JobState.SUCCEEDED
