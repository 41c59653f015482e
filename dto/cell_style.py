"""
CellStyle: an immutable, self-contained copy of a cell's formatting.

openpyxl cells expose their style components through proxies that share
state with the workbook's style table.  ``CellStyle.from_cell`` clones
every component, and ``apply_to`` clones them again on the way out, so a
CellStyle never aliases a live cell and two cells styled from the same
CellStyle never share a component.
"""

from __future__ import annotations

from copy import copy

from openpyxl.cell.cell import Cell
from openpyxl.styles import Alignment, Border, Font, Protection
from openpyxl.styles.borders import DEFAULT_BORDER
from openpyxl.styles.fills import DEFAULT_EMPTY_FILL, Fill
from openpyxl.styles.fonts import DEFAULT_FONT
from pydantic import BaseModel


class CellStyle(BaseModel):
    font: Font
    fill: Fill
    border: Border
    alignment: Alignment
    protection: Protection
    number_format: str = "General"

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @classmethod
    def from_cell(cls, cell: Cell) -> "CellStyle":
        return cls(
            font=copy(cell.font),
            fill=copy(cell.fill),
            border=copy(cell.border),
            alignment=copy(cell.alignment),
            protection=copy(cell.protection),
            number_format=cell.number_format or "General",
        )

    @classmethod
    def default(cls) -> "CellStyle":
        """The style of a never-formatted cell."""
        return cls(
            font=copy(DEFAULT_FONT),
            fill=copy(DEFAULT_EMPTY_FILL),
            border=copy(DEFAULT_BORDER),
            alignment=Alignment(),
            protection=Protection(),
        )

    def apply_to(self, cell: Cell) -> None:
        cell.font = copy(self.font)
        cell.fill = copy(self.fill)
        cell.border = copy(self.border)
        cell.alignment = copy(self.alignment)
        cell.protection = copy(self.protection)
        cell.number_format = self.number_format

    def clone(self) -> "CellStyle":
        return CellStyle(
            font=copy(self.font),
            fill=copy(self.fill),
            border=copy(self.border),
            alignment=copy(self.alignment),
            protection=copy(self.protection),
            number_format=self.number_format,
        )

    def without_strike(self) -> "CellStyle":
        """A clone whose font has strike-through turned off."""
        style = self.clone()
        if style.font.strike:
            style.font.strike = False
        return style
