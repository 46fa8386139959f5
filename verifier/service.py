"""
service.py - Certificate Search Orchestration
==============================================
CertificateVerifier ties the pieces together:

    search(admit_number)
      1. validate the admit number            (no I/O on failure)
      2. get sheet data from the cache        (cache.py)
         on a miss: discover sheets           (discovery.py)
                    read each sheet in blocks (paginator.py -> fetcher.py -> retry.py)
      3. scan for the first matching row      (search.py)
      4. map it to a SearchResult             (models.py)

It is also the only place that turns an exception into a user-facing
message (describe_error).
"""

import logging
import time
from typing import Dict, Optional

from .cache import CacheStatus, TableCache
from .config import Settings
from .discovery import TableDiscovery
from .errors import (
    EmptyDataset,
    ExhaustedRetries,
    FetchError,
    NotFound,
    ValidationError,
)
from .fetcher import TableFetcher
from .http_client import SheetsClient
from .messages import message
from .models import SearchResult, TableSet, record_count, to_record
from .paginator import Paginator
from .search import MatchPolicy, find_by_key

logger = logging.getLogger(__name__)


class CertificateVerifier:
    """
    Looks up certificate records by admit number.

    Create one per process and reuse it; the cache lives as long as the
    instance does.

    Usage:
        verifier = CertificateVerifier(settings)
        try:
            record = verifier.search("A100")
        except VerifierError as e:
            print(verifier.describe_error(e))
        finally:
            verifier.close()
    """

    def __init__(
        self,
        settings: Settings,
        client: SheetsClient | None = None,
        cache: TableCache | None = None,
        sleep=time.sleep,
    ):
        self.settings = settings
        self.client = client or SheetsClient(settings)
        self.cache = cache or TableCache(ttl=settings.cache_ttl_sec)
        self.policy = MatchPolicy(case_sensitive=settings.case_sensitive)

        self.fetcher = TableFetcher(self.client, settings, sleep=sleep)
        self.discovery = TableDiscovery(self.fetcher, settings)
        self.paginator = Paginator(
            self.fetcher,
            batch_size=settings.batch_size,
            default_max_rows=settings.max_rows,
            pause_sec=settings.batch_pause_sec,
            sleep=sleep,
        )

    # -------------------------------------------------------------------------
    # DATA LOADING
    # -------------------------------------------------------------------------

    def load_tables(self) -> TableSet:
        """
        Fetch every sheet from the API, bypassing the cache.

        Sheets are read one after another in discovery order. Sheets with no
        data rows are left out of the result. Any fetch failure aborts the
        whole load.
        """
        tables = self.discovery.list_tables()
        table_set: TableSet = {}

        for i, info in enumerate(tables, start=1):
            logger.info(f"Processing {info.name}: {i}/{len(tables)}")
            table = self.paginator.fetch_full_table(info.name, info.row_count)
            if len(table) > 0:
                table_set[info.name] = table

        logger.info(
            f"Total records loaded from {len(table_set)} sheets: {record_count(table_set)}"
        )
        return table_set

    def tables(self) -> TableSet:
        """Sheet data from the cache, fetched first if the cache is stale."""
        return self.cache.get_or_fetch(self.load_tables)

    # -------------------------------------------------------------------------
    # SEARCH
    # -------------------------------------------------------------------------

    def validate_key(self, admit_number: str | None) -> str:
        """
        Check an admit number before searching.

        Returns:
            The admit number with surrounding whitespace removed.

        Raises:
            ValidationError: Empty, or shorter than settings.min_key_length
        """
        key = (admit_number or "").strip()
        if not key:
            raise ValidationError("empty_key", self.settings.min_key_length)
        if len(key) < self.settings.min_key_length:
            raise ValidationError("short_key", self.settings.min_key_length)
        return key

    def search(self, admit_number: str | None) -> SearchResult:
        """
        Find the certificate record for `admit_number`.

        Raises:
            ValidationError: The admit number was rejected (no network call made)
            EmptyDataset: Every sheet was empty
            NotFound: No sheet had a matching row
            ExhaustedRetries / FetchError: The data could not be fetched
        """
        key = self.validate_key(admit_number)
        table_set = self.tables()

        if record_count(table_set) == 0:
            raise EmptyDataset()

        match = find_by_key(table_set, key, self.policy)
        if match is None:
            raise NotFound(key, len(table_set), record_count(table_set))

        row, sheet_name = match
        logger.debug(f"Found {key} in {sheet_name}")
        return to_record(row, sheet_name)

    # -------------------------------------------------------------------------
    # ERROR TRANSLATION
    # -------------------------------------------------------------------------

    def describe_error(self, exc: Exception) -> str:
        """
        Turn an exception from search() into a message for the end user.

        Fetch failures are told apart by their HTTP status: 429 means rate
        limiting, 400/401/403 an API key problem, 404 a wrong spreadsheet ID.
        Everything else gets the generic "try again later" message.
        """
        locale = self.settings.locale

        if isinstance(exc, ValidationError):
            return message(exc.message_key, locale, min_length=exc.min_length)
        if isinstance(exc, NotFound):
            return message(
                "not_found", locale,
                table_count=exc.table_count, record_count=exc.record_count,
            )
        if isinstance(exc, EmptyDataset):
            return message("empty_dataset", locale)

        status = 0
        if isinstance(exc, (ExhaustedRetries, FetchError)):
            status = exc.status

        if status == 429:
            return message("rate_limited", locale)
        if status in (400, 401, 403):
            return message("access_denied", locale)
        if status == 404:
            return message("sheet_missing", locale)
        return message("generic", locale)

    # -------------------------------------------------------------------------
    # CACHE MANAGEMENT
    # -------------------------------------------------------------------------

    def cache_status(self) -> CacheStatus:
        return self.cache.status()

    def clear_cache(self):
        self.cache.invalidate()

    def statistics(self) -> Optional[Dict[str, int]]:
        """Records per sheet in the cached data, or None when nothing is cached."""
        table_set = self.cache.get()
        if table_set is None:
            return None
        return {name: len(table) for name, table in table_set.items()}

    def close(self):
        self.client.close()
