"""
retry.py - Exponential Backoff Retry
=====================================
Wraps a single API call so that transient failures (timeouts, rate limits,
server errors) are retried with exponential backoff plus random jitter.

Every failure is first classified:
- RETRYABLE    : worth trying again (network errors, 408, 429, 5xx)
- PERMANENT    : retrying cannot help (bad API key 400, 403, 404, malformed responses, ...)
- EMPTY_RESULT : the sheet/range does not exist - the caller turns it into "no rows"

Only RETRYABLE failures consume the retry budget. The other two are raised
straight away, unchanged, so a bad spreadsheet ID does not cost the full
backoff schedule.

Wait time before attempt n+1 (n = failed attempts so far, 1-based):
    base_delay * 2 ** (n - 1) + random.uniform(0, 1.0)

With base_delay = 1.0 and max_attempts = 3:
    after attempt 1: 1.0s + jitter
    after attempt 2: 2.0s + jitter
    after attempt 3: no wait, ExhaustedRetries is raised
"""

import enum
import logging
import random
import time
from typing import Callable, TypeVar

from .errors import ExhaustedRetries, RangeNotFound, TransientFetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound of the random jitter added to every backoff delay (seconds)
MAX_JITTER_SEC = 1.0


class FailureKind(enum.Enum):
    RETRYABLE = "retryable"
    PERMANENT = "permanent"
    EMPTY_RESULT = "empty_result"


# Which HTTP status codes are worth retrying
# 408 = Request Timeout
# 429 = Too Many Requests (rate limited)
# 500 = Internal Server Error
# 502 = Bad Gateway
# 503 = Service Unavailable
# 504 = Gateway Timeout
RETRY_STATUSES = (408, 429, 500, 502, 503, 504)


# Text the Sheets API puts in a 400 body when the sheet/range does not exist
RANGE_NOT_FOUND_TEXT = "unable to parse range"


def classify_status(status: int, body: str = "") -> FailureKind:
    """
    Classify a non-2xx HTTP status code.

    The Sheets API answers 400 both for a range on a sheet that does not
    exist ("Unable to parse range") and for a rejected API key
    ("API key not valid"). Only the first is an empty result; every other
    400 is permanent.
    Any 5xx is retryable, even ones not listed in RETRY_STATUSES.
    """
    if status == 400:
        if RANGE_NOT_FOUND_TEXT in (body or "").lower():
            return FailureKind.EMPTY_RESULT
        return FailureKind.PERMANENT
    if status in RETRY_STATUSES or status >= 500:
        return FailureKind.RETRYABLE
    return FailureKind.PERMANENT


def classify_failure(exc: Exception) -> FailureKind:
    """
    Classify an exception raised by a wrapped operation.

    Exceptions that are not ours (e.g. a bug in the operation) are treated
    as permanent so they surface immediately instead of being retried.
    """
    if isinstance(exc, RangeNotFound):
        return FailureKind.EMPTY_RESULT
    if isinstance(exc, TransientFetchError):
        return FailureKind.RETRYABLE
    # PermanentFetchError, MalformedResponse and anything unexpected
    return FailureKind.PERMANENT


def backoff_delay(attempt: int, base_delay: float, jitter: Callable[[], float]) -> float:
    """Delay to wait after failed attempt number `attempt` (1-based)."""
    return base_delay * (2 ** (attempt - 1)) + jitter()


def _default_jitter() -> float:
    return random.uniform(0, MAX_JITTER_SEC)


def retry_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    classify: Callable[[Exception], FailureKind] = classify_failure,
    sleep: Callable[[float], None] = time.sleep,
    jitter: Callable[[], float] = _default_jitter,
    label: str = "request",
) -> T:
    """
    Call `operation` until it succeeds, retrying retryable failures.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Total number of calls allowed (must be >= 1)
        base_delay: Backoff base in seconds
        classify: Maps an exception to a FailureKind
        sleep: Sleep function (injectable for tests)
        jitter: Returns the random jitter in seconds (injectable for tests)
        label: Short description used in log messages

    Returns:
        Whatever `operation` returns on its first successful call.

    Raises:
        ExhaustedRetries: Every attempt failed with a retryable error.
            `last_error` is the exception from the final attempt.
        Exception: Any permanent or empty-result failure, unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            if classify(e) is not FailureKind.RETRYABLE:
                raise

            if attempt == max_attempts:
                logger.error(f"{label} failed after {attempt} attempts: {e}")
                raise ExhaustedRetries(e, attempt) from e

            wait_time = backoff_delay(attempt, base_delay, jitter)
            logger.warning(
                f"{label} failed ({e}). Retrying in {wait_time:.2f}s "
                f"(Attempt {attempt}/{max_attempts})..."
            )
            sleep(wait_time)

    # Unreachable: the loop either returns or raises
    raise AssertionError("retry loop exited without a result")
