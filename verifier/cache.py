"""
cache.py - Time-Bounded Data Cache
===================================
Holds the most recent full fetch (every sheet) for a fixed time window so
repeated searches do not re-download the spreadsheet.

Rules:
------
- At most one payload is stored at a time.
- An entry is valid while (now - created_at) < ttl. Expired entries are
  never served.
- A failed fetch leaves the cache empty.
- A fetch that returned no records is handed back but not stored, so data
  added to an empty spreadsheet shows up on the next search.
- Concurrent misses share one fetch: the first caller fetches while the
  others wait on the lock, then find the fresh entry.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .models import TableSet, record_count

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    payload: T
    created_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.created_at < self.ttl


@dataclass(frozen=True)
class CacheStatus:
    """Snapshot of the cache for logging and the --stats flag."""
    valid: bool
    age_seconds: Optional[float] = None
    table_count: int = 0
    record_count: int = 0

    def describe(self) -> str:
        if not self.valid:
            return "Cache empty or expired"
        return (
            f"Cache valid ({self.age_seconds:.0f}s old, "
            f"{self.table_count} sheets, {self.record_count} records)"
        )


class TableCache:
    """
    In-memory cache for the fetched TableSet.

    Usage:
        cache = TableCache(ttl=300)
        tables = cache.get_or_fetch(load_all_sheets)
    """

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[CacheEntry[TableSet]] = None
        self._lock = threading.Lock()

    def _current(self) -> Optional[CacheEntry[TableSet]]:
        """The stored entry if still valid, else None."""
        entry = self._entry
        if entry is not None and entry.is_valid(self._clock()):
            return entry
        return None

    def get(self) -> Optional[TableSet]:
        """Return the cached payload without fetching, or None."""
        entry = self._current()
        return entry.payload if entry else None

    def get_or_fetch(self, fetch_fn: Callable[[], TableSet]) -> TableSet:
        """
        Return cached data while fresh; otherwise call fetch_fn and store its result.

        Exceptions from fetch_fn propagate and nothing is stored. A payload
        with no records is returned but not stored.
        """
        entry = self._current()
        if entry is not None:
            logger.debug("Using cached sheet data")
            return entry.payload

        with self._lock:
            # Another thread may have refreshed the cache while we waited
            entry = self._current()
            if entry is not None:
                return entry.payload

            self._entry = None
            logger.info("Fetching fresh sheet data")
            payload = fetch_fn()
            if record_count(payload) == 0:
                logger.info("Fetched no records; not caching")
                return payload
            self._entry = CacheEntry(payload=payload, created_at=self._clock(), ttl=self.ttl)
            return payload

    def invalidate(self):
        """Drop the cached entry unconditionally."""
        self._entry = None
        logger.info("Sheet cache cleared")

    def status(self) -> CacheStatus:
        entry = self._current()
        if entry is None:
            return CacheStatus(valid=False)
        return CacheStatus(
            valid=True,
            age_seconds=self._clock() - entry.created_at,
            table_count=len(entry.payload),
            record_count=record_count(entry.payload),
        )
