"""
Section Replicator: expands the tour block to one section per record.

Steps, all on the same MutationContext:
  0. ``strip_strikethrough`` : optional, clears struck-out fonts sheet-wide.
  1. ``snapshot_block`` : capture values, styles, row heights and merges
     of the template block before anything is bound.
  2. ``clear_overflow`` : wipe everything below the block so a shorter
     run never leaves rows from a longer one behind.
  3. ``clone_block``    : write the snapshot at a section's start row.

Section 0 is the template block itself; section ``i >= 1`` starts at
``end_row + 1 + (i - 1) * height``, so sections are contiguous and are
written in increasing row order.
"""

from __future__ import annotations

import logging
from copy import copy
from typing import Any, List, Optional, Tuple

from openpyxl.cell.cell import MergedCell
from pydantic import BaseModel

from dto.cell_style import CellStyle
from dto.template import SectionRange
from dto.tour import TourRecord
from replication.binder import bind_section
from replication.context import MutationContext
from utils.cells import coord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class CellSnapshot(BaseModel):
    column: int
    value: Any = None
    style: Optional[CellStyle] = None

    model_config = {"arbitrary_types_allowed": True}


class RowSnapshot(BaseModel):
    height: Optional[float] = None
    cells: List[CellSnapshot] = []


class BlockSnapshot(BaseModel):
    rows: List[RowSnapshot] = []
    # (row_offset_start, min_col, row_offset_end, max_col) for merges
    # lying entirely inside the block
    merges: List[Tuple[int, int, int, int]] = []


def snapshot_block(ctx: MutationContext) -> BlockSnapshot:
    """Capture the unbound template block so every clone starts from it."""
    ws, block = ctx.ws, ctx.block

    rows: List[RowSnapshot] = []
    for row in range(block.start_row, block.end_row + 1):
        cells: List[CellSnapshot] = []
        for col in block.columns:
            cell = ws.cell(row=row, column=col)
            style: Optional[CellStyle] = None
            try:
                style = CellStyle.from_cell(cell)
                if ctx.layout.strip_strikethrough:
                    style = style.without_strike()
            except Exception:
                ctx.record_style_failure(coord(col, row), "read")
            value = None if isinstance(cell, MergedCell) else cell.value
            cells.append(CellSnapshot(column=col, value=value, style=style))
        height = ws.row_dimensions[row].height if row in ws.row_dimensions else None
        rows.append(RowSnapshot(height=height, cells=cells))

    merges: List[Tuple[int, int, int, int]] = []
    for mcr in ws.merged_cells.ranges:
        inside = (
            mcr.min_row >= block.start_row
            and mcr.max_row <= block.end_row
            and mcr.min_col >= block.min_col
            and mcr.max_col <= block.max_col
        )
        if inside:
            merges.append(
                (
                    mcr.min_row - block.start_row,
                    mcr.min_col,
                    mcr.max_row - block.start_row,
                    mcr.max_col,
                )
            )
        elif mcr.max_row >= block.start_row and mcr.min_row <= block.end_row:
            logger.warning(
                "Merged range %s crosses the tour block %s and will not be "
                "replicated",
                mcr.coord,
                block.ref,
            )

    return BlockSnapshot(rows=rows, merges=merges)


# ---------------------------------------------------------------------------
# Strike-through removal
# ---------------------------------------------------------------------------


def strip_strikethrough(ctx: MutationContext) -> int:
    """
    Turn off strike-through on every font in rows ``1 .. clear_to_row``
    of the block's column span.  Returns the number of cells changed.
    """
    ws, block = ctx.ws, ctx.block
    last = max(ctx.layout.clear_to_row, block.end_row)
    changed = 0
    for row in ws.iter_rows(
        min_row=1, max_row=last, min_col=block.min_col, max_col=block.max_col
    ):
        for cell in row:
            if isinstance(cell, MergedCell) or not cell.font.strike:
                continue
            try:
                font = copy(cell.font)
                font.strike = False
                cell.font = font
            except Exception:
                ctx.record_style_failure(cell.coordinate, "unstrike")
                continue
            changed += 1
    if changed:
        logger.info("Removed strike-through from %d cell(s)", changed)
    return changed


# ---------------------------------------------------------------------------
# Overflow clearing
# ---------------------------------------------------------------------------


def clear_overflow(ctx: MutationContext) -> int:
    """
    Clear every cell below the block, across the column span, down to
    ``max(layout.clear_to_row, ws.max_row)``.  Returns the last cleared row.
    """
    ws, block = ctx.ws, ctx.block
    first = block.end_row + 1
    last = max(ctx.layout.clear_to_row, ws.max_row or 0)
    if last < first:
        return last

    for mcr in list(ws.merged_cells.ranges):
        if (
            mcr.max_row >= first
            and mcr.min_row <= last
            and mcr.max_col >= block.min_col
            and mcr.min_col <= block.max_col
        ):
            if mcr.min_row <= block.end_row:
                logger.warning(
                    "Unmerging %s: it extends below the tour block", mcr.coord
                )
            ws.unmerge_cells(mcr.coord)

    blank = CellStyle.default()
    for row in range(first, last + 1):
        if row in ws.row_dimensions:
            ws.row_dimensions[row].height = None
        for col in block.columns:
            cell = ws.cell(row=row, column=col)
            cell.value = None
            try:
                blank.apply_to(cell)
            except Exception:
                ctx.record_style_failure(coord(col, row), "reset")

    logger.info("Cleared overflow rows %d-%d", first, last)
    return last


# ---------------------------------------------------------------------------
# Cloning
# ---------------------------------------------------------------------------


def clone_block(ctx: MutationContext, snapshot: BlockSnapshot, start_row: int) -> SectionRange:
    """Write *snapshot* as a new section whose first row is *start_row*."""
    ws = ctx.ws

    # Merge first: merging replaces the covered cells, so styles go on after.
    for row_off_start, min_col, row_off_end, max_col in snapshot.merges:
        ws.merge_cells(
            start_row=start_row + row_off_start,
            start_column=min_col,
            end_row=start_row + row_off_end,
            end_column=max_col,
        )

    for offset, row_snap in enumerate(snapshot.rows):
        row = start_row + offset
        if row_snap.height is not None:
            ws.row_dimensions[row].height = row_snap.height

        for cell_snap in row_snap.cells:
            target = ws.cell(row=row, column=cell_snap.column)
            if not isinstance(target, MergedCell):
                target.value = cell_snap.value
            if cell_snap.style is None:
                continue
            try:
                cell_snap.style.apply_to(target)
            except Exception:
                ctx.record_style_failure(coord(cell_snap.column, row), "apply")

    section = SectionRange(start_row=start_row, end_row=start_row + len(snapshot.rows) - 1)
    logger.debug("Cloned tour block to rows %d-%d", section.start_row, section.end_row)
    return section


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def replicate_sections(ctx: MutationContext, records: List[TourRecord]) -> List[SectionRange]:
    """
    Lay out and bind one section per record.

    The first record is bound into the template block in place; each
    further record gets a clone directly below the previous section.
    With no records the block is left as-is, tokens included.
    """
    block = ctx.block
    if ctx.layout.strip_strikethrough:
        strip_strikethrough(ctx)
    snapshot = snapshot_block(ctx)
    clear_overflow(ctx)

    if not records:
        logger.warning(
            "No tour records: tour block %s left unbound", block.ref
        )
        return []

    sections: List[SectionRange] = []
    for index, record in enumerate(records):
        if index == 0:
            section = block.section_range(0)
        else:
            section = clone_block(ctx, snapshot, block.section_start(index))
        replaced = bind_section(ctx, section, record)
        logger.info(
            "Section %d (rows %d-%d): '%s', %d placeholder(s) bound",
            index + 1,
            section.start_row,
            section.end_row,
            record.tour_name,
            replaced,
        )
        sections.append(section)
    return sections
