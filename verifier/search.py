"""
search.py - Admit Number Search
================================
Linear scan over already-fetched sheets. No I/O happens here.

Search order is sheet order, then row order within each sheet; the first
matching row wins, so a duplicate admit number in a later sheet is never
returned.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ValidationError
from .models import Row, TableSet


@dataclass(frozen=True)
class MatchPolicy:
    """
    How admit numbers are compared.

    Both sides are stripped of surrounding whitespace. Unless
    case_sensitive is set they are also case-folded, so "a100" matches
    "A100".
    """
    case_sensitive: bool = False

    def normalize(self, value: str) -> str:
        value = value.strip()
        return value if self.case_sensitive else value.casefold()


def find_by_key(
    table_set: TableSet,
    key: str,
    policy: MatchPolicy = MatchPolicy(),
) -> Optional[Tuple[Row, str]]:
    """
    Find the first row whose admit number matches `key`.

    Args:
        table_set: Sheets to search, in priority order
        key: Admit number to look for
        policy: Comparison rules

    Returns:
        (row, sheet_name) for the first match, or None if nothing matched.

    Raises:
        ValidationError: `key` is empty or only whitespace
    """
    if not key or not key.strip():
        raise ValidationError("empty_key")

    target = policy.normalize(key)

    for name, table in table_set.items():
        for row in table.rows:
            if row[0] and policy.normalize(row[0]) == target:
                return row, name

    return None
