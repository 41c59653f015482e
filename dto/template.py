"""
Template-side DTOs: the repeatable tour block and its placeholder tokens.

    TemplateBlock    : configured row range + column span of one section
    PlaceholderToken : a vocabulary entry, e.g. "{{num_adult}}" → num_adult
    LocatedToken     : a token found at a concrete (row, column)
    LocatedBlock     : the validated block plus the tokens found in it
"""

from __future__ import annotations

from typing import List, Literal, Tuple

from pydantic import BaseModel, model_validator

from utils.cells import coord

TOKEN_FIELDS = Literal["tour_name", "num_adult", "num_chd", "departure_time", "notes"]

# A template block must contain at least one of these.
CORE_FIELDS: Tuple[str, ...] = ("tour_name", "num_adult", "num_chd")


class PlaceholderToken(BaseModel):
    """An exact-match cell literal bound to one TourRecord field."""

    field: TOKEN_FIELDS
    text: str

    model_config = {"frozen": True}

    @property
    def is_core(self) -> bool:
        return self.field in CORE_FIELDS


class SectionRange(BaseModel):
    """Inclusive row range occupied by one bound section."""

    start_row: int
    end_row: int

    model_config = {"frozen": True}


class TemplateBlock(BaseModel):
    """The fixed, configured tour block of the template layout."""

    start_row: int
    end_row: int
    min_col: int
    max_col: int

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_bounds(self) -> "TemplateBlock":
        if self.start_row < 1 or self.min_col < 1:
            raise ValueError("block rows and columns are 1-based")
        if self.end_row <= self.start_row:
            raise ValueError(
                f"block end_row ({self.end_row}) must be greater than "
                f"start_row ({self.start_row})"
            )
        if self.max_col < self.min_col:
            raise ValueError(
                f"block max_col ({self.max_col}) is left of min_col ({self.min_col})"
            )
        return self

    @property
    def height(self) -> int:
        return self.end_row - self.start_row + 1

    @property
    def columns(self) -> range:
        return range(self.min_col, self.max_col + 1)

    @property
    def ref(self) -> str:
        """A1-style range, e.g. ``A17:T25``."""
        return f"{coord(self.min_col, self.start_row)}:{coord(self.max_col, self.end_row)}"

    def section_start(self, index: int) -> int:
        """
        First row of section *index* (0-based).

        Section 0 is the template block itself; section ``i >= 1`` starts
        at ``end_row + 1 + (i - 1) * height``.
        """
        if index < 0:
            raise ValueError("section index must be >= 0")
        if index == 0:
            return self.start_row
        return self.end_row + 1 + (index - 1) * self.height

    def section_range(self, index: int) -> SectionRange:
        start = self.section_start(index)
        return SectionRange(start_row=start, end_row=start + self.height - 1)


class LocatedToken(BaseModel):
    token: PlaceholderToken
    row: int
    column: int

    @property
    def coordinate(self) -> str:
        return coord(self.column, self.row)


class LocatedBlock(BaseModel):
    """Result of validating the configured block against a worksheet."""

    block: TemplateBlock
    tokens: List[LocatedToken] = []

    @property
    def fields(self) -> List[str]:
        seen: List[str] = []
        for located in self.tokens:
            if located.token.field not in seen:
                seen.append(located.token.field)
        return seen
