"""
discovery.py - Sheet Discovery
===============================
Works out which sheets to search, and roughly how many rows each one has.

The spreadsheet metadata endpoint returns something like:

    {"sheets": [
        {"properties": {"title": "Sheet1", "gridProperties": {"rowCount": 2500, ...}}},
        {"properties": {"title": "Sheet2", "gridProperties": {"rowCount": 1000, ...}}}
    ]}

Discovery never fails: if the metadata request or its parsing goes wrong
for any reason, the configured VERIFIER_SHEET_NAMES list is used instead.
"""

import logging
from typing import List

from .config import Settings
from .errors import MalformedResponse, VerifierError
from .fetcher import TableFetcher
from .models import TableInfo

logger = logging.getLogger(__name__)


def parse_sheet_metadata(body: dict) -> List[TableInfo]:
    """
    Extract sheet titles and row counts from a metadata response.

    Raises:
        MalformedResponse: "sheets" missing, or a sheet without a title
    """
    sheets = body.get("sheets")
    if not isinstance(sheets, list):
        raise MalformedResponse("Metadata response has no 'sheets' list")

    tables = []
    for sheet in sheets:
        props = sheet.get("properties") if isinstance(sheet, dict) else None
        if not isinstance(props, dict) or not isinstance(props.get("title"), str):
            raise MalformedResponse("Sheet entry without a title")

        grid = props.get("gridProperties") or {}
        row_count = grid.get("rowCount") if isinstance(grid, dict) else None
        if not isinstance(row_count, int):
            row_count = None

        tables.append(TableInfo(name=props["title"], row_count=row_count))
    return tables


class TableDiscovery:
    """Lists the sheets to search, in search order."""

    def __init__(self, fetcher: TableFetcher, settings: Settings):
        self.fetcher = fetcher
        self.settings = settings

    def configured_tables(self) -> List[TableInfo]:
        """The static sheet list from configuration (row counts unknown)."""
        return [TableInfo(name=name) for name in self.settings.sheet_names]

    def list_tables(self) -> List[TableInfo]:
        """
        Return the sheets to search.

        With discovery enabled this asks the API for every sheet in the
        spreadsheet (in the order they appear there). With discovery
        disabled, or when the metadata call fails, the configured list is
        returned.
        """
        if not self.settings.discover_sheets:
            return self.configured_tables()

        try:
            tables = parse_sheet_metadata(self.fetcher.get_metadata())
        except VerifierError as e:
            logger.warning(
                f"Sheet discovery failed ({e}); "
                f"falling back to configured sheets {self.settings.sheet_names}"
            )
            return self.configured_tables()

        if not tables:
            logger.warning("Spreadsheet reports no sheets; using configured sheets")
            return self.configured_tables()

        logger.info(f"Available sheets: {[t.name for t in tables]}")
        return tables
