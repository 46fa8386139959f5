"""
verifier - Certificate Verifier
================================

Looks up student certificate records by admit number in a Google
Spreadsheet, read through the Sheets v4 REST API.

Modules:
--------
- config.py       : Configuration management (loads settings from .env)
- http_client.py  : HTTP client for the Sheets API
- retry.py        : Failure classification and exponential backoff
- fetcher.py      : Reads one block of rows from one sheet
- discovery.py    : Lists the sheets to search
- paginator.py    : Reads a whole sheet block by block
- cache.py        : Time-bounded in-memory cache of the fetched sheets
- search.py       : Admit number matching
- models.py       : Row/Table/SearchResult shapes and result mapping
- service.py      : CertificateVerifier, the search orchestrator
- messages.py     : User-facing messages (Bengali and English)
- loader.py       : Batch input loading (Excel/CSV)
- run_verifier.py : Command-line entry point

Usage:
------
    python -m verifier.run_verifier A100
    python -m verifier.run_verifier --input admits.xlsx

Workflow:
---------
1. Load configuration from .env file
2. Validate the admit number
3. Fetch every sheet (cached for VERIFIER_CACHE_TTL_SEC seconds)
4. Return the first row whose column A matches, searching sheets in order
"""

from .errors import VerifierError
from .models import SearchResult
from .service import CertificateVerifier

__all__ = ["CertificateVerifier", "SearchResult", "VerifierError"]
