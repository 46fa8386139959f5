"""
paginator.py - Batched Sheet Reads
===================================
Large sheets are read in fixed-size blocks instead of one huge request.

With batch_size = 1000 the requested ranges are:
    rows 2-1001, 1002-2001, 2002-3001, ...
(row 1 is the header and is never fetched)

Reading stops when:
    - a block comes back with fewer than batch_size rows (end of data), or
    - a block comes back empty, or
    - the next block would start past max_rows.
"""

import logging
import time
from typing import Callable

from .fetcher import TableFetcher
from .models import Table

logger = logging.getLogger(__name__)

# First data row (row 1 holds the column headers)
FIRST_DATA_ROW = 2


class Paginator:
    """Reads a whole sheet through successive fetch_range() calls."""

    def __init__(
        self,
        fetcher: TableFetcher,
        batch_size: int = 1000,
        default_max_rows: int = 100000,
        pause_sec: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.fetcher = fetcher
        self.batch_size = batch_size
        self.default_max_rows = default_max_rows
        self.pause_sec = pause_sec
        self._sleep = sleep

    def fetch_full_table(self, table_name: str, max_rows: int | None = None) -> Table:
        """
        Fetch every data row of `table_name`.

        Args:
            table_name: Sheet to read
            max_rows: Last row number that may hold data (from sheet metadata).
                Defaults to the configured ceiling.

        Returns:
            A Table with all rows in sheet order.

        Any error from the fetcher propagates; rows collected so far are dropped.
        """
        limit = max_rows if max_rows is not None else self.default_max_rows
        rows = []
        start_row = FIRST_DATA_ROW

        while start_row <= limit:
            end_row = min(start_row + self.batch_size - 1, limit)
            batch = self.fetcher.fetch_range(table_name, start_row, end_row)
            rows.extend(batch)

            if len(batch) < self.batch_size:
                break

            start_row = end_row + 1
            if start_row <= limit:
                # Flat pacing pause so we do not hammer the API
                self._sleep(self.pause_sec)

        logger.info(f"Fetched {len(rows)} rows from {table_name}")
        return Table(name=table_name, rows=rows)
