"""
Top-level output DTOs for one report run.

    ReportResult
      ├─ records:  List[TourRecord]     (aggregated, first-occurrence order)
      ├─ sections: List[SectionRange]   (one per bound section)
      ├─ totals:   ReportTotals
      └─ workbook: the mutated openpyxl Workbook (not serialised)
"""

from __future__ import annotations

from typing import List, Optional

from openpyxl import Workbook
from pydantic import BaseModel, Field

from dto.template import SectionRange
from dto.tour import TourRecord


class ReportTotals(BaseModel):
    total_adult: int = 0
    total_chd: int = 0


class ReportResult(BaseModel):
    """Summary of a completed run plus the workbook to serialise."""

    sheet_name: str
    records: List[TourRecord] = []
    sections: List[SectionRange] = []
    totals: ReportTotals = ReportTotals()

    # Recoverable per-cell style anomalies; never fail the run.
    style_failures: int = 0

    workbook: Optional[Workbook] = Field(default=None, exclude=True)

    model_config = {"arbitrary_types_allowed": True}
