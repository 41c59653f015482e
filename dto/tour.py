"""
Tour records extracted from a dispatch spreadsheet.

A TourRecord is immutable once built; merging two rows for the same tour
produces a new record.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class TourRecord(BaseModel):
    """Aggregated passenger counts for one tour (identity = tour_name)."""

    tour_name: str
    num_adult: int = Field(default=0, ge=0)
    num_chd: int = Field(default=0, ge=0)
    departure_time: str = ""
    notes: str = ""

    model_config = {"frozen": True}

    @field_validator("tour_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("tour_name must be a non-empty string")
        return value

    @property
    def has_passengers(self) -> bool:
        return self.num_adult > 0 or self.num_chd > 0

    def merged_with(self, other: "TourRecord") -> "TourRecord":
        """
        Combine *other* (a later row for the same tour) into a new record.

        Counts are summed, notes are joined with ``"; "`` and the first
        non-empty departure time is kept.
        """
        if other.tour_name != self.tour_name:
            raise ValueError(
                f"Cannot merge '{other.tour_name}' into '{self.tour_name}'"
            )
        notes = "; ".join(n for n in (self.notes, other.notes) if n)
        return self.model_copy(
            update={
                "num_adult": self.num_adult + other.num_adult,
                "num_chd": self.num_chd + other.num_chd,
                "departure_time": self.departure_time or other.departure_time,
                "notes": notes,
            }
        )
