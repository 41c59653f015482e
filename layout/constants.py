"""
Template layout configuration.

The tour block position is a contract with the template author: it is
configured here, never detected by scanning.  Defaults match the standard
EOD template (tour block A17:T25, totals in D24/E24) and can be overridden
through ``EOD_*`` environment variables (see ``load_layout``).
"""

from __future__ import annotations

import math
import os
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from dto.template import PlaceholderToken, TemplateBlock
from errors import TemplateConfigurationError
from utils.cells import column_index, parse_coord

DEFAULT_TOKENS: List[PlaceholderToken] = [
    PlaceholderToken(field="tour_name", text="{{tour_name}}"),
    PlaceholderToken(field="num_adult", text="{{num_adult}}"),
    PlaceholderToken(field="num_chd", text="{{num_chd}}"),
    PlaceholderToken(field="departure_time", text="{{departure_time}}"),
    PlaceholderToken(field="notes", text="{{notes}}"),
]


class TemplateLayout(BaseModel):
    """Where things live in the EOD report template."""

    # None → first worksheet of the template
    sheet_name: Optional[str] = None

    block_start_row: int = 17
    block_end_row: int = 25
    block_min_col: int = 1   # A
    block_max_col: int = 20  # T

    # Overflow region below the block is cleared up to at least this row
    clear_to_row: int = 200

    total_adult_cell: str = "D24"
    total_child_cell: str = "E24"

    # Fonts in the sheet and in the cloned block lose strike-through
    strip_strikethrough: bool = True

    # Bound notes wrap; their row grows one line per this many characters
    notes_chars_per_line: int = 80
    notes_line_height: float = 15
    notes_min_height: float = 20

    tokens: List[PlaceholderToken] = Field(default_factory=lambda: list(DEFAULT_TOKENS))

    model_config = {"frozen": True}

    @property
    def core_tokens(self) -> List[PlaceholderToken]:
        return [t for t in self.tokens if t.is_core]

    def block(self) -> TemplateBlock:
        """Build the configured TemplateBlock (raises ValueError if invalid)."""
        return TemplateBlock(
            start_row=self.block_start_row,
            end_row=self.block_end_row,
            min_col=self.block_min_col,
            max_col=self.block_max_col,
        )

    def summary_cells(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """
        ``((row, col), (row, col))`` of the adult and child total cells.

        Raises ``TemplateConfigurationError`` for a malformed coordinate.
        """
        cells = []
        for name, value in (
            ("total_adult_cell", self.total_adult_cell),
            ("total_child_cell", self.total_child_cell),
        ):
            try:
                cells.append(parse_coord(value))
            except ValueError as exc:
                raise TemplateConfigurationError(
                    f"Invalid summary cell {name}={value!r}: {exc}"
                ) from exc
        return cells[0], cells[1]

    def notes_height(self, text: str) -> float:
        """Row height that fits *text* wrapped across the notes row."""
        per_line = max(1, self.notes_chars_per_line)
        lines = max(1, math.ceil(len(text) / per_line))
        return max(self.notes_min_height, lines * self.notes_line_height)

    def token_for(self, value: object) -> Optional[PlaceholderToken]:
        """Return the token whose text exactly equals *value*, if any."""
        if not isinstance(value, str):
            return None
        for token in self.tokens:
            if value == token.text:
                return token
        return None


def _env_value(env_name: str, parse):
    raw = os.environ[env_name]
    try:
        return parse(raw)
    except ValueError as exc:
        raise TemplateConfigurationError(
            f"Invalid value for {env_name}: {raw!r}"
        ) from exc


def load_layout() -> TemplateLayout:
    """
    Build a TemplateLayout from ``EOD_*`` environment variables.

    Unparsable values raise ``TemplateConfigurationError``.
    """
    overrides = {}
    if os.getenv("EOD_TEMPLATE_SHEET"):
        overrides["sheet_name"] = os.getenv("EOD_TEMPLATE_SHEET")
    for env_name, field in (
        ("EOD_BLOCK_START_ROW", "block_start_row"),
        ("EOD_BLOCK_END_ROW", "block_end_row"),
        ("EOD_CLEAR_TO_ROW", "clear_to_row"),
    ):
        if os.getenv(env_name):
            overrides[field] = _env_value(env_name, lambda raw: int(raw.strip()))
    for env_name, field in (
        ("EOD_BLOCK_MIN_COL", "block_min_col"),
        ("EOD_BLOCK_MAX_COL", "block_max_col"),
    ):
        if os.getenv(env_name):
            overrides[field] = _env_value(env_name, column_index)
    for env_name, field in (
        ("EOD_TOTAL_ADULT_CELL", "total_adult_cell"),
        ("EOD_TOTAL_CHILD_CELL", "total_child_cell"),
    ):
        if os.getenv(env_name):
            overrides[field] = os.environ[env_name].strip().upper()
    return TemplateLayout(**overrides)
