import sys
from pathlib import Path

import pytest
from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from dto.dispatch import DispatchData  # noqa: E402
from layout.constants import TemplateLayout  # noqa: E402

THIN = Side(style="thin")
BOX = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)


def build_template() -> Workbook:
    """
    Standard EOD template: header rows 1-16, tour block A17:T25,
    totals in D24/E24, a footer below the block.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "EOD"

    ws["A1"] = "End of Day Report"
    ws["A1"].font = Font(bold=True, size=16)
    ws["B5"] = "Ship"
    ws["C5"] = "Grand Turk"

    ws["B17"] = "{{tour_name}}"
    ws["B17"].font = Font(bold=True, color="FF003366")
    ws["B17"].fill = PatternFill("solid", fgColor="FFFFFF00")
    ws.merge_cells("B17:I17")
    ws.row_dimensions[17].height = 30

    ws["B18"] = "Adults / Children"
    ws["D18"] = "{{num_adult}}"
    ws["E18"] = "{{num_chd}}"
    ws["D18"].number_format = "0"
    ws["E18"].number_format = "0"

    ws["B19"] = "Departure"
    ws["D19"] = "{{departure_time}}"

    ws["B20"] = "Total adults: {{num_adult}} est."
    ws["B21"] = "{{notes}}"

    for row in range(22, 26):
        for col in range(2, 10):
            ws.cell(row=row, column=col).border = BOX

    ws["B24"] = "TOTAL"
    ws["D24"] = 0
    ws["E24"] = 0

    ws["B30"] = "Prepared by"
    return wb


@pytest.fixture
def template_wb() -> Workbook:
    return build_template()


@pytest.fixture
def layout() -> TemplateLayout:
    return TemplateLayout()


def dispatch(*rows) -> DispatchData:
    return DispatchData.from_rows(list(rows))


@pytest.fixture
def three_tours() -> DispatchData:
    return dispatch(
        {"Tour": "City Tour", "Adult": 10, "Child": 2, "Notes": "Late bus"},
        {"Tour": "Beach Trip", "Adult": 4, "Child": 1, "Departure Time": "09:30"},
        {"Tour": "Snorkel", "Adult": 6, "Child": 0},
    )
