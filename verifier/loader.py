"""
loader.py - Batch Input Loader
===============================
This module loads a list of admit numbers from Excel (.xlsx, .xls) or CSV
files for batch verification. It normalizes column names so the rest of the
application can always refer to the admit number column as "ADMIT_NO".

Column Name Normalization:
--------------------------
Input files may label the column in many ways:
- "Admit No", "Admit_Number", "admit number", "ADMIT NO", "Admit"

All of these are mapped to the single canonical name:
- "ADMIT_NO"
"""

import pandas as pd
from typing import List, Dict, Any
from pathlib import Path
import re


# =============================================================================
# COLUMN NAME NORMALIZATION
# =============================================================================

# Maps a normalized header (see normalize_header) to the canonical name
COLUMN_MAP = {
    'ADMITNO': 'ADMIT_NO',
    'ADMITNUMBER': 'ADMIT_NO',
    'ADMIT': 'ADMIT_NO',
    'ADMITCARDNO': 'ADMIT_NO',
}


def normalize_header(header: str) -> str:
    """
    Standardize a column name by removing spaces/underscores/dots and converting to uppercase.

    Examples:
        normalize_header("Admit No")      -> "ADMITNO"
        normalize_header("admit_number")  -> "ADMITNUMBER"
        normalize_header("Admit No.")     -> "ADMITNO"
    """
    normalized = re.sub(r'[\s_.]+', '', header)
    return normalized.strip().upper()


# =============================================================================
# MAIN DATA LOADER
# =============================================================================

def load_admit_numbers(filepath: str, header_row: int = 0) -> List[Dict[str, Any]]:
    """
    Load admit numbers from an Excel or CSV file.

    Args:
        filepath: Path to the input file (.xlsx, .xls, or .csv)
        header_row: Which row of an Excel file contains the headers (0-indexed)

    Returns:
        One dict per data row, e.g.
        [{'InputRow': 1, 'ADMIT_NO': 'A100'}, {'InputRow': 2, 'ADMIT_NO': 'A101'}]
        Blank admit numbers are kept as '' so they show up in the results.

    Raises:
        FileNotFoundError: If the input file doesn't exist
        ValueError: If the file type is unsupported or no admit number column is found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {filepath}")

    # -------------------------------------------------------------------------
    # STEP 1: Read the file as text
    # -------------------------------------------------------------------------
    # dtype=str keeps admit numbers like "00123" from being turned into 123
    if path.suffix in ['.xlsx', '.xls']:
        df = pd.read_excel(filepath, header=header_row, dtype=str)
    elif path.suffix == '.csv':
        df = pd.read_csv(filepath, dtype=str)
    else:
        raise ValueError(
            f"Unsupported file type: {path.suffix}. "
            "Only .csv, .xlsx, and .xls files are supported."
        )

    # Remove rows that are completely empty
    df.dropna(how='all', inplace=True)

    # -------------------------------------------------------------------------
    # STEP 2: Normalize column names
    # -------------------------------------------------------------------------
    normalized_columns = {}
    for col in df.columns:
        normalized_name = normalize_header(str(col))
        final_name = COLUMN_MAP.get(normalized_name, normalized_name)

        # First matching column wins if the file has duplicates
        if final_name not in normalized_columns.values():
            normalized_columns[col] = final_name

    df = df[list(normalized_columns)].rename(columns=normalized_columns)

    if 'ADMIT_NO' not in df.columns:
        raise ValueError(
            "No admit number column found. "
            f"Available columns after normalization: {list(df.columns)}"
        )

    # -------------------------------------------------------------------------
    # STEP 3: Build the row list
    # -------------------------------------------------------------------------
    # InputRow is 1-based to match what users see in a spreadsheet
    admit_numbers = df['ADMIT_NO'].fillna('').astype(str).str.strip()

    return [
        {'InputRow': i, 'ADMIT_NO': value}
        for i, value in enumerate(admit_numbers, start=1)
    ]
