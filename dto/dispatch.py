"""
Parsed dispatch data: worksheets → rows → column-keyed field maps.

This is the shape handed to the record extractor.  Values are kept as
they came out of the spreadsheet (str, int, float, datetime, numpy
scalars, …); interpretation happens in the extractor.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel


class DispatchSheet(BaseModel):
    """One worksheet of dispatch rows."""

    name: str
    columns: List[str] = []
    rows: List[Dict[str, Any]] = []

    model_config = {"arbitrary_types_allowed": True}


class DispatchData(BaseModel):
    """All dispatch worksheets, in workbook order."""

    sheets: List[DispatchSheet] = []

    @classmethod
    def from_rows(cls, rows: List[Dict[str, Any]], sheet_name: str = "Sheet1") -> "DispatchData":
        """Wrap a flat list of rows as a single-sheet DispatchData."""
        columns: List[str] = []
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)
        return cls(sheets=[DispatchSheet(name=sheet_name, columns=columns, rows=rows)])
