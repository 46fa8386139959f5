"""
models.py - Data Shapes and Result Mapping
===========================================
Rows come back from the spreadsheet as lists of strings. This module pins
them down to fixed-width tuples, groups them into named tables, and maps a
matched row to the SearchResult record handed to the presentation layer.

Column Layout (A-G):
--------------------
    A: Admit number (the search key)
    B: Student name
    C: Father's name
    D: Mother's name
    E: Institution
    F: Course
    G: Result
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# Number of columns read from every sheet (A through G)
COLUMN_COUNT = 7

# Shown in place of an empty cell
PLACEHOLDER = "N/A"

# A row is always exactly COLUMN_COUNT strings
Row = Tuple[str, str, str, str, str, str, str]


def make_row(cells: List[Any]) -> Row:
    """
    Turn a raw list of cells into a fixed-width Row.

    The Sheets API trims trailing empty cells, so short rows are padded
    with "". Anything past column G is ignored. Non-string scalars
    (numbers, booleans) are converted with str(); None becomes "".

    Examples:
        make_row(["A100", "Asha"])  -> ("A100", "Asha", "", "", "", "", "")
        make_row([1001, None])      -> ("1001", "", "", "", "", "", "")
    """
    values = ["" if c is None else str(c) for c in cells[:COLUMN_COUNT]]
    values.extend([""] * (COLUMN_COUNT - len(values)))
    return tuple(values)


@dataclass(frozen=True)
class Table:
    """One worksheet: its name plus its data rows (header excluded)."""
    name: str
    rows: List[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


# Ordered name -> Table mapping. Insertion order is search priority.
TableSet = Dict[str, Table]


def record_count(table_set: TableSet) -> int:
    """Total number of data rows across every table."""
    return sum(len(t) for t in table_set.values())


@dataclass(frozen=True)
class TableInfo:
    """A table name as reported by discovery, with its row count if known."""
    name: str
    row_count: Optional[int] = None


@dataclass(frozen=True)
class SearchResult:
    """The matched certificate record, plus the sheet it was found in."""
    admit_number: str
    student_name: str
    father_name: str
    mother_name: str
    institution: str
    course: str
    result: str
    source_table: str

    def as_dict(self) -> Dict[str, str]:
        return {
            "AdmitNumber": self.admit_number,
            "StudentName": self.student_name,
            "FatherName": self.father_name,
            "MotherName": self.mother_name,
            "Institution": self.institution,
            "Course": self.course,
            "Result": self.result,
            "SourceSheet": self.source_table,
        }


def to_record(row: Row, source_table: str, placeholder: str = PLACEHOLDER) -> SearchResult:
    """
    Map a 7-cell row to a SearchResult.

    Empty or whitespace-only cells are replaced by `placeholder`, so the
    presentation layer never has to deal with blanks.

    Args:
        row: A Row produced by make_row()
        source_table: Name of the sheet the row came from
        placeholder: Text used for empty cells (default: "N/A")
    """
    cells = [cell.strip() or placeholder for cell in row]
    return SearchResult(*cells, source_table=source_table)
