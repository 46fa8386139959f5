"""
errors.py - Exception Types
============================
Every failure the verifier can raise derives from VerifierError, so callers
(the CLI, or any presentation layer) can catch one base class and hand the
exception to CertificateVerifier.describe_error() for a user-facing message.

Hierarchy:
----------
    VerifierError
    ├── ValidationError        : bad admit number, raised before any I/O
    ├── FetchError             : one HTTP request failed
    │   ├── TransientFetchError  (network error, 408, 429, 5xx - retried)
    │   ├── PermanentFetchError  (other 400s, 401, 403, 404, ... - not retried)
    │   ├── RangeNotFound        (400 "Unable to parse range" - treated as empty)
    │   └── MalformedResponse    (body does not have the expected shape)
    ├── ExhaustedRetries       : every retry attempt failed
    ├── NotFound               : no row matched the admit number
    └── EmptyDataset           : fetch worked but every table was empty
"""


class VerifierError(Exception):
    """Base class for all verifier errors."""


# =============================================================================
# INPUT ERRORS
# =============================================================================

class ValidationError(VerifierError):
    """
    The admit number was rejected before searching.

    Attributes:
        message_key: Key into messages.MESSAGES ("empty_key" or "short_key")
        min_length:  The configured minimum length (for the message text)
    """

    def __init__(self, message_key: str, min_length: int = 1):
        super().__init__(f"Invalid admit number ({message_key})")
        self.message_key = message_key
        self.min_length = min_length


# =============================================================================
# FETCH ERRORS
# =============================================================================

class FetchError(VerifierError):
    """
    A single request to the spreadsheet API failed.

    Attributes:
        status: HTTP status code, or 0 for network-level failures
        path:   The API path that was requested (never includes the API key)
    """

    def __init__(self, status: int, message: str, path: str = ""):
        super().__init__(message)
        self.status = status
        self.path = path


class TransientFetchError(FetchError):
    """Network failure or a status worth retrying (408, 429, 5xx)."""


class PermanentFetchError(FetchError):
    """A status that will not change on retry (bad API key 400, 401, 403, 404, ...)."""


class RangeNotFound(FetchError):
    """The requested sheet/range does not exist. Callers treat it as no data."""


class MalformedResponse(FetchError):
    """The response body did not match the expected JSON shape."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(0, message, path)


class ExhaustedRetries(VerifierError):
    """
    All attempts of a retried operation failed.

    Attributes:
        last_error: The exception raised by the final attempt
        attempts:   How many times the operation was called
    """

    def __init__(self, last_error: Exception, attempts: int):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts

    @property
    def status(self) -> int:
        """Status code of the last failure (0 if it had none)."""
        return getattr(self.last_error, "status", 0)


# =============================================================================
# DATA-LEVEL OUTCOMES
# =============================================================================

class NotFound(VerifierError):
    """No row in any searched table had a matching admit number."""

    def __init__(self, key: str, table_count: int = 0, record_count: int = 0):
        super().__init__(f"No record for admit number {key!r}")
        self.key = key
        self.table_count = table_count
        self.record_count = record_count


class EmptyDataset(VerifierError):
    """The fetch succeeded but returned zero rows across all tables."""

    def __init__(self):
        super().__init__("No data rows in any table")
