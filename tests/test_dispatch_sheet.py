import io

import pytest
from openpyxl import Workbook

from errors import InputShapeError
from extractors.dispatch_sheet import (
    find_header_row,
    load_dispatch_file,
    read_dispatch_sheet,
    read_dispatch_workbook,
)
from extractors.records import extract_tour_list


def _workbook():
    wb = Workbook()
    ws = wb.active
    ws.title = "Cover"
    ws.append(["Port call", "Grand Turk"])

    ws = wb.create_sheet("Grand Turk")
    ws.append(["Dispatch - Grand Turk"])
    ws.append(["Date", "2024-03-01"])
    ws.append(["Tour Name", "Departure", "Return", "Adults", "Children", None])
    ws.append(["Glass Bottom Boat", "09:00", "11:00", 20, 4, "x"])
    ws.append([None, None, None, None, None, None])
    ws.append(["  ", "", None, None, None, None])
    ws.append(["Horse Ride", "13:00", "15:00", "6", None, None])
    return wb


def test_header_row_found_below_title_block():
    wb = _workbook()
    assert find_header_row(wb["Grand Turk"]) == 3
    assert find_header_row(wb["Cover"]) == 1


def test_rows_keyed_by_header_and_blank_rows_dropped():
    sheet = read_dispatch_sheet(_workbook()["Grand Turk"], 3)
    assert sheet.columns == ["Tour Name", "Departure", "Return", "Adults", "Children", "Column6"]
    assert len(sheet.rows) == 2
    assert sheet.rows[0]["Tour Name"] == "Glass Bottom Boat"
    assert sheet.rows[0]["Column6"] == "x"
    assert sheet.rows[1]["Adults"] == "6"


def test_dispatch_like_sheets_are_preferred():
    data = read_dispatch_workbook(_workbook())
    assert [s.name for s in data.sheets] == ["Grand Turk"]
    records = extract_tour_list(data)
    assert [(r.tour_name, r.num_adult, r.num_chd) for r in records] == [
        ("Glass Bottom Boat", 20, 4),
        ("Horse Ride", 6, 0),
    ]


def test_all_sheets_read_when_none_look_like_dispatch():
    wb = Workbook()
    wb.active.append(["Tour", "Adult"])
    wb.active.append(["Walk", 3])
    wb.create_sheet("Other").append(["misc"])
    data = read_dispatch_workbook(wb)
    assert [s.name for s in data.sheets] == ["Sheet", "Other"]
    assert [r.tour_name for r in extract_tour_list(data)] == ["Walk"]


def test_load_dispatch_file_from_bytes():
    buf = io.BytesIO()
    _workbook().save(buf)
    data = load_dispatch_file(buf.getvalue())
    assert data.sheets[0].rows[0]["Adults"] == 20


def test_unreadable_dispatch_file():
    with pytest.raises(InputShapeError):
        load_dispatch_file(b"\x00\x01")
