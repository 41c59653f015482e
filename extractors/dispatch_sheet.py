"""
Dispatch Sheet Reader: openpyxl workbook → DispatchData.

Dispatch workbooks usually carry a title block above the column headers,
so the header row is found by looking for a tour-name column rather than
assumed to be row 1.  Sheets that look like dispatch sheets are preferred;
when none qualify every sheet is read and the extractor sorts it out.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import openpyxl
from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from dto.dispatch import DispatchData, DispatchSheet
from errors import InputShapeError
from extractors.records import TOUR_NAME_ALIASES

logger = logging.getLogger(__name__)

# Lower-case header fragments that mark a dispatch sheet.
DISPATCH_HEADERS = ("tour name", "departure", "return", "adults", "children")
_MIN_DISPATCH_HEADERS = 3


def _header_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def find_header_row(ws: Worksheet, search_rows: int = 20) -> int:
    """Return the first row holding a tour-name column header (else 1)."""
    aliases = set(TOUR_NAME_ALIASES)
    last = min(ws.max_row or 1, search_rows)
    for row_idx, values in enumerate(
        ws.iter_rows(min_row=1, max_row=last, values_only=True), start=1
    ):
        if any(_header_text(v) in aliases for v in values):
            return row_idx
    return 1


def is_dispatch_sheet(ws: Worksheet, header_row: int) -> bool:
    headers = [
        _header_text(v).lower()
        for v in next(
            ws.iter_rows(min_row=header_row, max_row=header_row, values_only=True),
            (),
        )
    ]
    found = [h for h in DISPATCH_HEADERS if any(h in text for text in headers)]
    return len(found) >= _MIN_DISPATCH_HEADERS


def read_dispatch_sheet(ws: Worksheet, header_row: int) -> DispatchSheet:
    """Read rows below *header_row* as ``{column header: value}`` maps."""
    header_values = next(
        ws.iter_rows(min_row=header_row, max_row=header_row, values_only=True), ()
    )
    columns: List[str] = []
    for idx, value in enumerate(header_values, start=1):
        text = _header_text(value)
        columns.append(text or f"Column{idx}")

    rows: List[Dict[str, Any]] = []
    for values in ws.iter_rows(min_row=header_row + 1, values_only=True):
        if all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
            continue
        row: Dict[str, Any] = {}
        for idx, value in enumerate(values):
            name = columns[idx] if idx < len(columns) else f"Column{idx + 1}"
            # First occurrence wins for duplicated headers
            if name not in row or row[name] is None:
                row[name] = value
        rows.append(row)

    return DispatchSheet(name=ws.title, columns=columns, rows=rows)


def read_dispatch_workbook(wb: Workbook, header_search_rows: int = 20) -> DispatchData:
    """Turn an openpyxl dispatch workbook into DispatchData."""
    if wb is None or not wb.sheetnames:
        raise InputShapeError("Dispatch workbook has no worksheets")

    candidates: List[Tuple[Worksheet, int]] = []
    dispatch_like: List[Tuple[Worksheet, int]] = []
    for ws in wb.worksheets:
        header_row = find_header_row(ws, header_search_rows)
        candidates.append((ws, header_row))
        if is_dispatch_sheet(ws, header_row):
            dispatch_like.append((ws, header_row))

    chosen = dispatch_like or candidates
    logger.info(
        "Reading %d dispatch sheet(s): %s",
        len(chosen),
        [ws.title for ws, _ in chosen],
    )

    sheets = []
    for ws, header_row in chosen:
        sheet = read_dispatch_sheet(ws, header_row)
        logger.info(
            "  -> '%s': header row %d, %d data row(s)",
            ws.title,
            header_row,
            len(sheet.rows),
        )
        sheets.append(sheet)
    return DispatchData(sheets=sheets)


def load_dispatch_file(
    source: Union[str, Path, bytes],
    header_search_rows: int = 20,
) -> DispatchData:
    """Load a dispatch .xlsx from a path or raw bytes and read it."""
    wb: Optional[Workbook] = None
    try:
        if isinstance(source, bytes):
            wb = openpyxl.load_workbook(io.BytesIO(source), data_only=True)
        else:
            wb = openpyxl.load_workbook(source, data_only=True)
    except Exception as exc:
        raise InputShapeError(f"Unreadable dispatch workbook: {exc}") from exc

    try:
        return read_dispatch_workbook(wb, header_search_rows)
    finally:
        wb.close()
