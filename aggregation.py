"""
Aggregator & Finalizer.

Totals come from the aggregated records, never from the bound cells, and
land in two fixed summary cells of the template's original layout.
Writing them again overwrites the same cells.
"""

from __future__ import annotations

import logging
from typing import Iterable

from openpyxl.cell.cell import MergedCell

from dto.output import ReportTotals
from dto.tour import TourRecord
from replication.context import MutationContext

logger = logging.getLogger(__name__)


def compute_totals(records: Iterable[TourRecord]) -> ReportTotals:
    total_adult = 0
    total_chd = 0
    for record in records:
        total_adult += record.num_adult
        total_chd += record.num_chd
    return ReportTotals(total_adult=total_adult, total_chd=total_chd)


def _write_summary_cell(ctx: MutationContext, row: int, col: int, value: int) -> None:
    ws = ctx.ws
    cell = ws.cell(row=row, column=col)
    if isinstance(cell, MergedCell):
        # Write through to the top-left cell of the merge
        for mcr in ws.merged_cells.ranges:
            if mcr.min_row <= row <= mcr.max_row and mcr.min_col <= col <= mcr.max_col:
                cell = ws.cell(row=mcr.min_row, column=mcr.min_col)
                break
    cell.value = value


def write_totals(ctx: MutationContext, totals: ReportTotals) -> None:
    """Write *totals* into the configured summary cells."""
    layout = ctx.layout
    adult_cell, child_cell = layout.summary_cells()
    _write_summary_cell(ctx, *adult_cell, totals.total_adult)
    _write_summary_cell(ctx, *child_cell, totals.total_chd)
    logger.info(
        "Totals: %d adult(s) -> %s, %d child(ren) -> %s",
        totals.total_adult,
        layout.total_adult_cell,
        totals.total_chd,
        layout.total_child_cell,
    )
