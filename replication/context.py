"""
MutationContext: the state one report run threads through each step.

Clearing, cloning, binding and finalizing all mutate the same worksheet;
instead of sharing it implicitly every step receives this object.  One
context maps to exactly one workbook and one run.
"""

from __future__ import annotations

import logging

from openpyxl.worksheet.worksheet import Worksheet
from pydantic import BaseModel

from dto.template import LocatedBlock, TemplateBlock
from layout.constants import TemplateLayout

logger = logging.getLogger(__name__)


class MutationContext(BaseModel):
    ws: Worksheet
    layout: TemplateLayout
    located: LocatedBlock

    # Per-cell style anomalies seen so far (recoverable)
    style_failures: int = 0

    model_config = {"arbitrary_types_allowed": True}

    @property
    def block(self) -> TemplateBlock:
        return self.located.block

    def record_style_failure(self, coordinate: str, action: str) -> None:
        """Log a cell whose style could not be read or applied, and move on."""
        self.style_failures += 1
        logger.warning(
            "Could not %s style for %s!%s, continuing without it",
            action,
            self.ws.title,
            coordinate,
            exc_info=True,
        )
