"""
Pytest configuration and fixtures
"""
import re
import sys
from pathlib import Path
from urllib.parse import unquote

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from verifier.config import Settings  # noqa: E402
from verifier.errors import PermanentFetchError, RangeNotFound  # noqa: E402


HEADER = ["Admit No", "Name", "Father", "Mother", "Institution", "Course", "Result"]


class FakeSheetsApi:
    """
    Stand-in for SheetsClient that serves sheets from memory.

    `sheets` maps sheet name -> data rows (header excluded; it is added
    automatically as row 1). Every get_json() call is recorded in `calls`.
    Errors queued in `failures` are raised, in order, before serving.
    """

    def __init__(self, sheets=None, row_counts=None):
        self.sheets = {name: [HEADER] + rows for name, rows in (sheets or {}).items()}
        self.row_counts = row_counts or {}
        self.calls = []
        self.failures = []
        self.metadata_error = None
        self.closed = False

    def get_json(self, path, params=None):
        self.calls.append(path)
        if self.failures:
            raise self.failures.pop(0)

        if "/values/" not in path:
            if self.metadata_error:
                raise self.metadata_error
            return {"sheets": [
                {"properties": {
                    "title": name,
                    "gridProperties": {"rowCount": self.row_counts.get(name, 1000)},
                }}
                for name in self.sheets
            ]}

        a1 = unquote(path.split("/values/", 1)[1])
        name, rng = a1.rsplit("!", 1)
        if name.startswith("'"):
            name = name[1:-1].replace("''", "'")
        start, end = map(int, re.match(r"A(\d+):G(\d+)", rng).groups())

        if name not in self.sheets:
            raise RangeNotFound(400, f"Unable to parse range: {a1}", path)

        values = self.sheets[name][start - 1:end]
        return {"values": values} if values else {"range": a1}

    def value_calls(self):
        return [unquote(c.split("/values/", 1)[1]) for c in self.calls if "/values/" in c]

    def close(self):
        self.closed = True


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def settings():
    return Settings(
        api_key="test-key",
        spreadsheet_id="sheet123",
        sheet_names=["Sheet1"],
        discover_sheets=False,
        batch_size=1000,
        batch_pause_sec=0.1,
        cache_ttl_sec=300,
        max_retries=3,
        retry_delay_sec=1.0,
        min_key_length=3,
        locale="en",
    )


@pytest.fixture
def sleeps():
    """A sleep function that records the requested delays instead of sleeping."""
    recorded = []

    def fake_sleep(seconds):
        recorded.append(seconds)

    fake_sleep.calls = recorded
    return fake_sleep


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_api():
    return FakeSheetsApi()


def make_rows(count, prefix="R"):
    """`count` distinct 7-cell rows with keys R1, R2, ..."""
    return [[f"{prefix}{i}", f"Student {i}", "F", "M", "Inst", "Course", "Pass"]
            for i in range(1, count + 1)]


def permanent(status):
    return PermanentFetchError(status, f"HTTP {status}", "/v4/spreadsheets/sheet123")
