"""
Substring search over timeline rows.

Matching is case-insensitive against the display value of a cell, one column
or all of them. Searches only read the table.
"""
from __future__ import annotations

from typing import Iterator, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .table import TimelineTable


def _display_text(value) -> str:
    # tag checkboxes have no display text
    if value is None or isinstance(value, bool):
        return ""
    return str(value)


def row_matches(table: TimelineTable, row: int, term: str, column: Optional[str] = None) -> bool:
    """True if ``term`` occurs in ``column`` of ``row`` (any column when None)."""
    if not term:
        return False
    needle = term.casefold()

    if column is None:
        values = table.get_display_row(row) or []
    else:
        position = table.column_index(column)
        if position < 0:
            return False
        values = [table.get_cell(row, position)]

    return any(needle in _display_text(value).casefold() for value in values)


def find_rows(
    table: TimelineTable,
    term: str,
    column: Optional[str] = None,
    limit: Optional[int] = None,
) -> Iterator[int]:
    """Yield matching row numbers in file order, stopping after ``limit`` hits."""
    found = 0
    for row in range(table.row_count):
        if limit is not None and found >= limit:
            return
        if row_matches(table, row, term, column):
            found += 1
            yield row


def has_match(table: TimelineTable, term: str, column: Optional[str] = None) -> bool:
    return next(find_rows(table, term, column, limit=1), None) is not None
