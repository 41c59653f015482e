"""
Record Extractor: dispatch rows → aggregated TourRecords.

Dispatch sheets use whatever column headers the operator typed, so every
field is resolved through a prioritised alias list.  Rows without a tour
name, or with no passengers at all, are noise (header rows, blank rows,
cancelled tours) and are skipped without error.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from dto.dispatch import DispatchData
from dto.tour import TourRecord
from errors import InputShapeError

logger = logging.getLogger(__name__)


TOUR_NAME_ALIASES: Sequence[str] = (
    "Tour Name", "tour_name", "Tour", "TOUR", "TourName", "Product", "Activity",
)
ADULT_ALIASES: Sequence[str] = (
    "Adults", "num_adult", "Adult", "ADULT", "adult", "Num Adult",
    "Adult Count", "AdultCount", "Pax Adult",
)
CHILD_ALIASES: Sequence[str] = (
    "Children", "num_chd", "Child", "CHD", "child", "CHILD", "Num Child",
    "Children Count", "ChildCount", "Pax Child", "Kids",
)
DEPARTURE_ALIASES: Sequence[str] = (
    "TOUR TIME + duration", "Tour Time", "Departure Time", "departure_time",
    "Departure", "departure", "DEPARTURE", "Time",
)
NOTES_ALIASES: Sequence[str] = (
    "Notes", "notes", "NOTES", "Note", "note", "NOTE",
    "Comments", "comments", "COMMENTS", "Comment", "comment", "COMMENT",
    "Remarks", "remarks", "REMARKS", "Incident, accident, cancellation etc.",
)

_LEADING_INT = re.compile(r"^\s*\+?(\d+)")


# ---------------------------------------------------------------------------
# Field resolution
# ---------------------------------------------------------------------------


def parse_count(value: Any) -> Optional[int]:
    """
    Parse a passenger count, or return None if *value* is not a
    non-negative integer.

    Strings are read up to the first non-digit ("12 pax" → 12), floats are
    truncated, and numpy scalars are unwrapped.
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, np.integer):
        value = value.item()
    elif isinstance(value, np.floating):
        value = value.item()

    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value) or value < 0:
            return None
        return int(value)
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        return int(m.group(1)) if m else None
    return None


def first_text(row: Mapping[str, Any], aliases: Sequence[str]) -> str:
    """Return the first alias value that is a non-blank string, trimmed."""
    for alias in aliases:
        value = row.get(alias)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def first_count(row: Mapping[str, Any], aliases: Sequence[str]) -> int:
    """Return the first alias value that parses as a count, else 0."""
    for alias in aliases:
        count = parse_count(row.get(alias))
        if count is not None:
            return count
    return 0


def record_from_row(row: Mapping[str, Any]) -> Optional[TourRecord]:
    """Build a TourRecord from one dispatch row, or None if it is noise."""
    tour_name = first_text(row, TOUR_NAME_ALIASES)
    if not tour_name:
        return None

    record = TourRecord(
        tour_name=tour_name,
        num_adult=first_count(row, ADULT_ALIASES),
        num_chd=first_count(row, CHILD_ALIASES),
        departure_time=first_text(row, DEPARTURE_ALIASES),
        notes=first_text(row, NOTES_ALIASES),
    )
    if not record.has_passengers:
        return None
    return record


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_tour_records(data: DispatchData) -> Dict[str, TourRecord]:
    """
    Collapse every dispatch row on every sheet into one TourRecord per
    distinct tour name, in order of first appearance.

    Raises ``InputShapeError`` only when *data* has no worksheets.
    """
    if data is None or not data.sheets:
        raise InputShapeError("Dispatch data contains no worksheets")

    records: Dict[str, TourRecord] = {}
    for sheet in data.sheets:
        used = 0
        for idx, row in enumerate(sheet.rows):
            try:
                record = record_from_row(row)
            except Exception:
                logger.debug(
                    "  %s row %d: unusable, skipped", sheet.name, idx, exc_info=True
                )
                continue
            if record is None:
                continue

            existing = records.get(record.tour_name)
            records[record.tour_name] = (
                existing.merged_with(record) if existing else record
            )
            used += 1

        logger.info(
            "Sheet '%s': %d of %d row(s) contributed", sheet.name, used, len(sheet.rows)
        )

    logger.info("Extracted %d distinct tour(s)", len(records))
    return records


def extract_tour_list(data: DispatchData) -> List[TourRecord]:
    return list(extract_tour_records(data).values())
