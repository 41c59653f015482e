"""
Template Section Locator.

Validates the configured tour block against a template worksheet and
reports the placeholder tokens it contains.  Nothing is auto-detected:
if the configured rows do not hold a core token the template and the
layout disagree, which is a configuration error rather than a silent
no-op that would ship a report with a blank section.
"""

from __future__ import annotations

import logging

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet
from pydantic import ValidationError

from dto.template import LocatedBlock, LocatedToken
from errors import InputShapeError, TemplateConfigurationError
from layout.constants import TemplateLayout

logger = logging.getLogger(__name__)


def select_template_sheet(wb: Workbook, layout: TemplateLayout) -> Worksheet:
    """Return the configured template worksheet, or the first one."""
    if wb is None or not wb.sheetnames:
        raise InputShapeError("Template workbook has no worksheets")

    if layout.sheet_name:
        if layout.sheet_name not in wb.sheetnames:
            raise InputShapeError(
                f"Template worksheet '{layout.sheet_name}' not found. "
                f"Available sheets: {wb.sheetnames}"
            )
        return wb[layout.sheet_name]
    return wb.worksheets[0]


def locate_template_block(ws: Worksheet, layout: TemplateLayout) -> LocatedBlock:
    """
    Validate the configured block on *ws* and collect its tokens.

    Raises ``TemplateConfigurationError`` when the configured range is
    malformed, names an invalid summary cell, lies beyond the end of the
    sheet, or contains none of the
    core tokens (``{{tour_name}}``, ``{{num_adult}}``, ``{{num_chd}}``).
    """
    expected = [t.text for t in layout.core_tokens]

    try:
        block = layout.block()
    except ValidationError as exc:
        raise TemplateConfigurationError(
            f"Invalid template block configuration: {exc.errors()[0]['msg']}"
        ) from exc
    # Summary cells are written last; reject a bad one before anything moves
    layout.summary_cells()

    if (ws.max_row or 0) < block.end_row:
        raise TemplateConfigurationError(
            f"Template sheet '{ws.title}' ends at row {ws.max_row}, "
            f"but the tour block is configured as {block.ref}",
            expected,
        )

    tokens = []
    for row in ws.iter_rows(
        min_row=block.start_row,
        max_row=block.end_row,
        min_col=block.min_col,
        max_col=block.max_col,
    ):
        for cell in row:
            token = layout.token_for(cell.value)
            if token is not None:
                tokens.append(
                    LocatedToken(token=token, row=cell.row, column=cell.column)
                )

    if not any(t.token.is_core for t in tokens):
        raise TemplateConfigurationError(
            f"No placeholder token found in tour block {block.ref} "
            f"of sheet '{ws.title}'",
            expected,
        )

    located = LocatedBlock(block=block, tokens=tokens)
    logger.info(
        "Tour block %s on '%s': %d token(s) %s",
        block.ref,
        ws.title,
        len(tokens),
        located.fields,
    )
    return located
