"""
fetcher.py - Range Fetcher
===========================
Reads one block of rows (columns A-G) from one sheet.

Response Format:
----------------
The values endpoint answers with:

    {
        "range": "Sheet1!A2:G1001",
        "majorDimension": "ROWS",
        "values": [["A100", "Asha", ...], ["A101", "Bimal", ...]]
    }

"values" is left out entirely when the range holds no data. Trailing empty
cells are trimmed by the API, so rows can be shorter than 7 cells; they are
padded by models.make_row().
"""

import logging
import time
from typing import List
from urllib.parse import quote

from .config import Settings
from .errors import MalformedResponse, RangeNotFound
from .http_client import SheetsClient
from .models import Row, make_row
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Columns read from every sheet
FIRST_COLUMN = "A"
LAST_COLUMN = "G"


def a1_range(table_name: str, start_row: int, end_row: int) -> str:
    """
    Build an A1-notation range for rows start_row..end_row (inclusive).

    The sheet name is always single-quoted, with embedded quotes doubled.
    Unquoted names that look like cell references ("A1", "R1C1") or
    numbers ("2024") are rejected by the API.

    Examples:
        a1_range("Sheet1", 2, 1001)     -> "'Sheet1'!A2:G1001"
        a1_range("Batch 2024", 2, 10)   -> "'Batch 2024'!A2:G10"
    """
    name = "'" + table_name.replace("'", "''") + "'"
    return f"{name}!{FIRST_COLUMN}{start_row}:{LAST_COLUMN}{end_row}"


def parse_values(body: dict, path: str = "") -> List[Row]:
    """
    Validate a values response and convert it to Rows.

    Raises:
        MalformedResponse: "values" is not a list of lists of scalars
    """
    values = body.get("values", [])

    if not isinstance(values, list):
        raise MalformedResponse(
            f"'values' should be a list, got {type(values).__name__}", path
        )

    rows = []
    for i, raw in enumerate(values):
        if not isinstance(raw, list):
            raise MalformedResponse(f"Row {i} is not a list", path)
        if any(isinstance(cell, (list, dict)) for cell in raw):
            raise MalformedResponse(f"Row {i} contains a nested value", path)
        rows.append(make_row(raw))
    return rows


class TableFetcher:
    """
    Fetches row ranges from one spreadsheet.

    Every request goes through retry_with_backoff(), so callers only see
    ExhaustedRetries or a permanent error.
    """

    def __init__(self, client: SheetsClient, settings: Settings, sleep=time.sleep):
        self.client = client
        self.settings = settings
        self._sleep = sleep

    def _retry(self, operation, label: str):
        return retry_with_backoff(
            operation,
            max_attempts=self.settings.max_retries,
            base_delay=self.settings.retry_delay_sec,
            sleep=self._sleep,
            label=label,
        )

    def fetch_range(self, table_name: str, start_row: int, end_row: int) -> List[Row]:
        """
        Fetch rows start_row..end_row (1-based, inclusive) of `table_name`.

        Returns:
            The rows present in that range. May be shorter than requested
            (end of data), and is empty when the sheet does not exist.

        Raises:
            ExhaustedRetries: Retryable failures on every attempt
            PermanentFetchError: e.g. 403 (API key rejected) or 404 (bad spreadsheet ID)
            MalformedResponse: The body did not look like a values response
        """
        a1 = a1_range(table_name, start_row, end_row)
        path = (
            f"/v4/spreadsheets/{self.settings.spreadsheet_id}"
            f"/values/{quote(a1, safe='')}"
        )

        try:
            body = self._retry(
                lambda: self.client.get_json(path, {"majorDimension": "ROWS"}),
                label=f"Fetch {a1}",
            )
        except RangeNotFound:
            # A missing sheet is not an error, it just has no rows
            logger.info(f"Sheet {table_name!r} not found or empty")
            return []

        rows = parse_values(body, path)
        logger.debug(f"Fetched {len(rows)} rows from {a1}")
        return rows

    def get_metadata(self) -> dict:
        """Fetch sheet properties (titles and grid sizes) of the spreadsheet."""
        path = f"/v4/spreadsheets/{self.settings.spreadsheet_id}"
        return self._retry(
            lambda: self.client.get_json(path, {"fields": "sheets.properties"}),
            label="Fetch sheet metadata",
        )
