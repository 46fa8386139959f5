"""
Unit tests for cache module
"""
import threading
import time

import pytest

from verifier.cache import TableCache
from verifier.models import Table


def table_set(*names, rows_each=2):
    return {n: Table(n, [(f"{n}{i}", "", "", "", "", "", "") for i in range(rows_each)]) for n in names}


class CountingFetch:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.payload


class TestTableCache:
    """Test TableCache"""

    def test_miss_fetches(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        fetch = CountingFetch(table_set("Sheet1"))
        assert cache.get_or_fetch(fetch) is fetch.payload
        assert fetch.calls == 1

    def test_hit_within_ttl(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        fetch = CountingFetch(table_set("Sheet1"))
        cache.get_or_fetch(fetch)
        clock.advance(299.9)
        cache.get_or_fetch(fetch)
        assert fetch.calls == 1

    def test_refetch_after_ttl(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        fetch = CountingFetch(table_set("Sheet1"))
        cache.get_or_fetch(fetch)
        clock.advance(300)
        cache.get_or_fetch(fetch)
        assert fetch.calls == 2

    def test_expired_entry_not_served(self, clock):
        cache = TableCache(ttl=10, clock=clock)
        cache.get_or_fetch(CountingFetch(table_set("Sheet1")))
        clock.advance(11)
        assert cache.get() is None

    def test_invalidate(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        fetch = CountingFetch(table_set("Sheet1"))
        cache.get_or_fetch(fetch)
        cache.invalidate()
        assert cache.get() is None
        cache.get_or_fetch(fetch)
        assert fetch.calls == 2

    def test_failed_fetch_stores_nothing(self, clock):
        cache = TableCache(ttl=300, clock=clock)

        def boom():
            raise RuntimeError("fetch failed")

        with pytest.raises(RuntimeError):
            cache.get_or_fetch(boom)
        assert cache.get() is None
        assert cache.status().valid is False

    def test_failed_refresh_drops_stale_entry(self, clock):
        cache = TableCache(ttl=10, clock=clock)
        cache.get_or_fetch(CountingFetch(table_set("Sheet1")))
        clock.advance(20)

        def boom():
            raise RuntimeError("fetch failed")

        with pytest.raises(RuntimeError):
            cache.get_or_fetch(boom)
        assert cache.get() is None

    def test_empty_payload_is_not_stored(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        fetch = CountingFetch({})

        assert cache.get_or_fetch(fetch) == {}
        assert cache.get() is None
        assert cache.status().valid is False

        fetch.payload = table_set("Sheet1")
        clock.advance(10)
        assert cache.get_or_fetch(fetch) is fetch.payload
        assert fetch.calls == 2

    def test_tables_without_rows_are_not_stored(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        cache.get_or_fetch(CountingFetch(table_set("Sheet1", rows_each=0)))
        assert cache.get() is None

    def test_status(self, clock):
        cache = TableCache(ttl=300, clock=clock)
        assert cache.status().valid is False
        assert cache.status().describe() == "Cache empty or expired"

        cache.get_or_fetch(CountingFetch(table_set("Sheet1", "Sheet2", rows_each=3)))
        clock.advance(42)
        status = cache.status()

        assert status.valid is True
        assert status.age_seconds == pytest.approx(42)
        assert status.table_count == 2
        assert status.record_count == 6
        assert "2 sheets, 6 records" in status.describe()

    def test_concurrent_misses_share_one_fetch(self):
        cache = TableCache(ttl=300)
        calls = []

        def slow_fetch():
            calls.append(1)
            time.sleep(0.2)
            return table_set("Sheet1")

        results = []
        threads = [threading.Thread(target=lambda: results.append(cache.get_or_fetch(slow_fetch)))
                   for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert len(results) == 4
        assert all(r is results[0] for r in results)
