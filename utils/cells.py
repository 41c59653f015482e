"""
Cell coordinate helpers shared by the locator, replicator and finalizer.
"""

from __future__ import annotations

from typing import Tuple

from openpyxl.utils import get_column_letter, column_index_from_string
from openpyxl.utils.cell import coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException

# Worksheet limits of the .xlsx format
MAX_ROW = 1_048_576
MAX_COLUMN = 16_384


def coord(col: int, row: int) -> str:
    """Return an A1-style coordinate from 1-based col/row indices."""
    return f"{get_column_letter(col)}{row}"


def parse_coord(coordinate: str) -> Tuple[int, int]:
    """Parse 'AB12' → (row=12, col=28).  Both 1-based; raises ValueError."""
    text = str(coordinate).replace("$", "").strip().upper()
    try:
        letters, row = coordinate_from_string(text)
        col = column_index_from_string(letters)
    except (CellCoordinatesException, ValueError) as exc:
        raise ValueError(f"Invalid cell coordinate: {coordinate!r}") from exc
    if not (1 <= row <= MAX_ROW and 1 <= col <= MAX_COLUMN):
        raise ValueError(f"Cell coordinate out of range: {coordinate!r}")
    return row, col


def column_index(value: int | str) -> int:
    """Accept a 1-based column index or a column letter ('T')."""
    if isinstance(value, int):
        index = value
    else:
        text = str(value).strip()
        index = int(text) if text.isdigit() else column_index_from_string(text.upper())
    if not 1 <= index <= MAX_COLUMN:
        raise ValueError(f"Column out of range: {value!r}")
    return index
