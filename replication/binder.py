"""
Placeholder binding.

Only cells whose value *is* a token are replaced.  A cell that merely
contains a token inside longer text ("Total adults: {{num_adult}} est.")
is left alone, so headers and legends are never rewritten.

Bound notes wrap at the top-left of their cell and the row is grown to
fit the text (see ``TemplateLayout.notes_height``).
"""

from __future__ import annotations

import logging
from copy import copy
from typing import Union

from openpyxl.cell.cell import Cell, MergedCell

from dto.template import PlaceholderToken, SectionRange
from dto.tour import TourRecord
from replication.context import MutationContext

logger = logging.getLogger(__name__)


def token_value(record: TourRecord, token: PlaceholderToken) -> Union[str, int]:
    """Counts bind as ints so the cell's number format applies."""
    value = getattr(record, token.field)
    if token.field in ("num_adult", "num_chd"):
        return int(value)
    return str(value)


def format_notes_cell(ctx: MutationContext, cell: Cell, text: str) -> None:
    try:
        alignment = copy(cell.alignment)
        alignment.wrap_text = True
        alignment.vertical = "top"
        alignment.horizontal = "left"
        cell.alignment = alignment
    except Exception:
        ctx.record_style_failure(cell.coordinate, "wrap")

    dim = ctx.ws.row_dimensions[cell.row]
    height = ctx.layout.notes_height(text)
    if dim.height is None or dim.height < height:
        dim.height = height


def bind_section(ctx: MutationContext, section: SectionRange, record: TourRecord) -> int:
    """Replace every token in *section* with *record*'s fields."""
    ws, layout = ctx.ws, ctx.layout
    replaced = 0
    for row in ws.iter_rows(
        min_row=section.start_row,
        max_row=section.end_row,
        min_col=ctx.block.min_col,
        max_col=ctx.block.max_col,
    ):
        for cell in row:
            if isinstance(cell, MergedCell):
                continue
            token = layout.token_for(cell.value)
            if token is None:
                continue
            cell.value = token_value(record, token)
            if token.field == "notes":
                format_notes_cell(ctx, cell, cell.value)
            replaced += 1
            logger.debug("  %s %s -> %r", cell.coordinate, token.text, cell.value)
    return replaced
