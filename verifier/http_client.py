"""
http_client.py - HTTP Client for the Google Sheets API
=======================================================
This module handles all HTTP communication with the Sheets v4 REST API:
- Attaching the API key to every request
- Managing the HTTP session and headers
- Turning failed requests into typed exceptions (see errors.py)

One call to get_json() is exactly one HTTP request. Retrying is done one
level up (retry.py), so the client stays simple and easy to fake in tests.

Status Code Handling:
---------------------
- 2xx             : JSON body returned (must be a JSON object)
- 400 + "Unable to parse range" : RangeNotFound (sheet/range does not exist)
- other 400       : PermanentFetchError (e.g. "API key not valid")
- 408, 429, 5xx   : TransientFetchError (retried by the caller)
- other 4xx       : PermanentFetchError
- network errors  : TransientFetchError with status 0
"""

import logging
import requests
from .config import Settings
from .errors import (
    MalformedResponse,
    PermanentFetchError,
    RangeNotFound,
    TransientFetchError,
)
from .retry import FailureKind, classify_status

logger = logging.getLogger(__name__)


# =============================================================================
# HTTP CLIENT CLASS
# =============================================================================

class SheetsClient:
    """
    HTTP client for the Google Sheets API.

    Usage:
        with SheetsClient(settings) as client:
            body = client.get_json(f"/v4/spreadsheets/{sheet_id}", {"fields": "sheets.properties"})
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Configuration object containing base URL, API key and timeout
            session: Optional pre-built session (tests pass a mock here)
        """
        self.settings = settings

        # A Session gives us connection pooling across the many batch requests
        self.s = session or requests.Session()
        self.s.headers.update({
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "User-Agent": "certificate-verifier (gzip)",
        })

        self.base = settings.base_url
        self.timeout = settings.timeout_sec

    # -------------------------------------------------------------------------
    # API REQUEST METHODS
    # -------------------------------------------------------------------------

    def get_json(self, path: str, params: dict | None = None) -> dict:
        """
        Make one GET request and return the decoded JSON object.

        Args:
            path: API path, already URL-encoded (e.g., "/v4/spreadsheets/<id>/values/%27Sheet1%27%21A2%3AG1001")
            params: Optional query parameters; the API key is added automatically

        Returns:
            The response body parsed into a dict.

        Raises:
            TransientFetchError: Network error, or a retryable status code
            PermanentFetchError: A status code that retrying will not fix
            RangeNotFound: The API could not find the requested range (400 "Unable to parse range")
            MalformedResponse: The body is not a JSON object
        """
        url = f"{self.base}{path}"
        query = dict(params or {})
        query["key"] = self.settings.api_key

        # Only the path is logged so the API key never ends up in log files
        logger.debug(f"GET {path}")

        try:
            r = self.s.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            # Timeout, connection refused, DNS failure, etc.
            raise TransientFetchError(
                0, f"Network error: {type(e).__name__}: {e}", path
            ) from e

        if not 200 <= r.status_code < 300:
            self._raise_for_status(r, path)

        try:
            data = r.json()
        except ValueError as e:
            raise MalformedResponse(
                f"Invalid JSON response: {str(e)[:100]}", path
            ) from e

        if not isinstance(data, dict):
            raise MalformedResponse(
                f"Expected a JSON object but got {type(data).__name__}", path
            )

        return data

    def _raise_for_status(self, r: requests.Response, path: str):
        """Raise the FetchError subclass matching a non-2xx response."""
        message = f"HTTP {r.status_code}: {r.reason or ''} {(r.text or '')[:200]}".strip()
        kind = classify_status(r.status_code, r.text or "")

        if kind is FailureKind.EMPTY_RESULT:
            raise RangeNotFound(r.status_code, message, path)
        if kind is FailureKind.RETRYABLE:
            raise TransientFetchError(r.status_code, message, path)
        raise PermanentFetchError(r.status_code, message, path)

    # -------------------------------------------------------------------------
    # CLEANUP METHODS
    # -------------------------------------------------------------------------

    def close(self):
        """Close the HTTP session and release resources."""
        self.s.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
