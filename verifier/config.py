"""
config.py - Configuration Management
=====================================
This module handles loading and validating configuration from environment variables.
It reads settings from a .env file and makes them available to the rest of the application.

Environment Variables Used:
---------------------------
- VERIFIER_API_KEY          : (Required) Google Sheets API key
- VERIFIER_SPREADSHEET_ID   : (Required) ID of the spreadsheet holding the results
- VERIFIER_SHEET_NAMES      : (Optional) Comma-separated sheet names (default: "Sheet1")
- VERIFIER_DISCOVER_SHEETS  : (Optional) Ask the API which sheets exist (default: true)
- VERIFIER_BASE_URL         : (Optional) API root (default: https://sheets.googleapis.com)
- VERIFIER_BATCH_SIZE       : (Optional) Rows fetched per request (default: 1000)
- VERIFIER_MAX_ROWS         : (Optional) Row ceiling when the sheet size is unknown (default: 100000)
- VERIFIER_BATCH_PAUSE_SEC  : (Optional) Pause between batch requests (default: 0.1)
- VERIFIER_CACHE_TTL_SEC    : (Optional) How long fetched data is reused (default: 300)
- VERIFIER_MAX_RETRIES      : (Optional) Attempts per request (default: 3)
- VERIFIER_RETRY_DELAY_SEC  : (Optional) Base backoff delay (default: 1.0)
- VERIFIER_TIMEOUT_SEC      : (Optional) Request timeout in seconds (default: 20)
- VERIFIER_MIN_KEY_LENGTH   : (Optional) Shortest admit number accepted (default: 3)
- VERIFIER_CASE_SENSITIVE   : (Optional) Match admit numbers case-sensitively (default: false)
- VERIFIER_LOCALE           : (Optional) Message language, "bn" or "en" (default: "bn")
- VERIFIER_EXCEL_HEADER_ROW : (Optional) Header row in batch input Excel files (default: 0)

Example .env file:
------------------
VERIFIER_API_KEY=AIzaSy...
VERIFIER_SPREADSHEET_ID=1ia2pkU2Zx0IKF4XI4Os_pVZfdlFqb815IwkDmc9IBpc
VERIFIER_SHEET_NAMES=Sheet1,Sheet2,Sheet3
"""

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import List
from dotenv import load_dotenv


# =============================================================================
# SETTINGS DATACLASS
# =============================================================================
# All values are static: read once at startup and never changed.

@dataclass
class Settings:
    """Container for all application configuration values."""

    # Required: credentials and the spreadsheet to read
    api_key: str
    spreadsheet_id: str

    # Sheets to search, in priority order. Used as-is when discovery is off,
    # and as the fallback when discovery fails.
    sheet_names: List[str] = field(default_factory=lambda: ["Sheet1"])
    discover_sheets: bool = True

    base_url: str = "https://sheets.googleapis.com"

    # Pagination
    batch_size: int = 1000
    max_rows: int = 100000
    batch_pause_sec: float = 0.1

    # Caching and retries
    cache_ttl_sec: float = 300.0
    max_retries: int = 3
    retry_delay_sec: float = 1.0
    timeout_sec: int = 20

    # Search behaviour
    min_key_length: int = 3
    case_sensitive: bool = False
    locale: str = "bn"

    # Batch input: which row in Excel files contains the column headers
    excel_header_row: int = 0


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _clean(v: str | None) -> str | None:
    """
    Clean and normalize an environment variable value.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    # Remove surrounding quotes if present
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1]

    return v if v else None


def _flag(v: str | None, default: bool) -> bool:
    """Parse a true/false style variable. Unset means `default`."""
    v = _clean(v)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


def _names(v: str | None) -> List[str]:
    """Split a comma-separated list of sheet names, dropping blanks."""
    v = _clean(v)
    if not v:
        return ["Sheet1"]
    return [name.strip() for name in v.split(",") if name.strip()]


# =============================================================================
# MAIN CONFIGURATION LOADER
# =============================================================================

def load_settings() -> Settings:
    """
    Load application configuration from environment variables.

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        RuntimeError: If the API key or spreadsheet ID is missing
        ValueError: If a numeric variable cannot be parsed, or a value is out of range
    """
    # The .env file lives in the project root (one level up from verifier/)
    root_env = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=root_env)

    api_key = _clean(os.getenv("VERIFIER_API_KEY"))
    spreadsheet_id = _clean(os.getenv("VERIFIER_SPREADSHEET_ID"))

    if not api_key:
        raise RuntimeError(
            "VERIFIER_API_KEY is not set in environment. "
            "Please add it to your .env file."
        )
    if not spreadsheet_id:
        raise RuntimeError(
            "VERIFIER_SPREADSHEET_ID is not set in environment. "
            "Please add it to your .env file."
        )

    base = _clean(os.getenv("VERIFIER_BASE_URL")) or "https://sheets.googleapis.com"
    if not base.startswith("http"):
        base = "https://" + base
    base = base.rstrip("/")

    settings = Settings(
        api_key=api_key,
        spreadsheet_id=spreadsheet_id,
        sheet_names=_names(os.getenv("VERIFIER_SHEET_NAMES")),
        discover_sheets=_flag(os.getenv("VERIFIER_DISCOVER_SHEETS"), True),
        base_url=base,
        batch_size=int(os.getenv("VERIFIER_BATCH_SIZE", "1000")),
        max_rows=int(os.getenv("VERIFIER_MAX_ROWS", "100000")),
        batch_pause_sec=float(os.getenv("VERIFIER_BATCH_PAUSE_SEC", "0.1")),
        cache_ttl_sec=float(os.getenv("VERIFIER_CACHE_TTL_SEC", "300")),
        max_retries=int(os.getenv("VERIFIER_MAX_RETRIES", "3")),
        retry_delay_sec=float(os.getenv("VERIFIER_RETRY_DELAY_SEC", "1.0")),
        timeout_sec=int(os.getenv("VERIFIER_TIMEOUT_SEC", "20")),
        min_key_length=int(os.getenv("VERIFIER_MIN_KEY_LENGTH", "3")),
        case_sensitive=_flag(os.getenv("VERIFIER_CASE_SENSITIVE"), False),
        locale=(_clean(os.getenv("VERIFIER_LOCALE")) or "bn").lower(),
        excel_header_row=int(os.getenv("VERIFIER_EXCEL_HEADER_ROW", "0")),
    )

    # Values below 1 would make pagination or retrying loop forever / never run
    if settings.batch_size < 1:
        raise ValueError("VERIFIER_BATCH_SIZE must be at least 1")
    if settings.max_retries < 1:
        raise ValueError("VERIFIER_MAX_RETRIES must be at least 1")

    return settings
