import io

import openpyxl
import pytest
from openpyxl import Workbook

from aggregation import compute_totals
from conftest import build_template, dispatch
from dto.dispatch import DispatchData
from errors import InputShapeError, TemplateConfigurationError
from generator import generate_report, generate_report_bytes, main
from layout import TemplateLayout


def _template_bytes(wb=None):
    buf = io.BytesIO()
    (wb or build_template()).save(buf)
    return buf.getvalue()


def _dispatch_workbook(rows):
    wb = Workbook()
    ws = wb.active
    ws.title = "Grand Turk"
    ws.append(["Daily Dispatch"])
    ws.append([])
    ws.append(["Tour Name", "Departure", "Return", "Adults", "Children"])
    for row in rows:
        ws.append(row)
    return wb


def test_scenario_a_single_section_and_totals(template_wb):
    result = generate_report(
        template_wb,
        dispatch(
            {"Tour": "City Tour", "Adult": 10, "Child": 2},
            {"Tour": "City Tour", "Adult": 5, "Child": 0},
            {"Tour": "Beach Trip", "Adult": 0, "Child": 0},
        ),
    )
    ws = template_wb["EOD"]
    assert [r.tour_name for r in result.records] == ["City Tour"]
    assert len(result.sections) == 1
    assert ws["B17"].value == "City Tour"
    assert (ws["D18"].value, ws["E18"].value) == (15, 2)
    assert (ws["D24"].value, ws["E24"].value) == (15, 2)
    assert (result.totals.total_adult, result.totals.total_chd) == (15, 2)


def test_totals_do_not_depend_on_section_count(template_wb, three_tours):
    result = generate_report(template_wb, three_tours)
    ws = template_wb["EOD"]
    assert (ws["D24"].value, ws["E24"].value) == (20, 3)
    assert result.totals == compute_totals(result.records)


def test_totals_write_through_merged_summary_cell(template_wb, three_tours):
    template_wb["EOD"].merge_cells("F2:G2")
    layout = TemplateLayout(total_adult_cell="G2", total_child_cell="H2")
    generate_report(template_wb, three_tours, layout)
    ws = template_wb["EOD"]
    assert ws["F2"].value == 20
    assert ws["H2"].value == 3


def test_rerunning_finalizer_overwrites_totals(template_wb, three_tours, layout):
    from aggregation import write_totals
    from layout import locate_template_block
    from replication import MutationContext

    ws = template_wb["EOD"]
    ctx = MutationContext(ws=ws, layout=layout, located=locate_template_block(ws, layout))
    totals = compute_totals(generate_report(build_template(), three_tours).records)
    write_totals(ctx, totals)
    write_totals(ctx, totals)
    assert (ws["D24"].value, ws["E24"].value) == (20, 3)


def test_bytes_round_trip(three_tours):
    out = generate_report_bytes(_template_bytes(), three_tours)
    wb = openpyxl.load_workbook(io.BytesIO(out))
    ws = wb["EOD"]
    assert ws["B35"].value == "Snorkel"
    assert "B35:I35" in {str(r) for r in ws.merged_cells.ranges}
    assert ws["D24"].value == 20


def test_each_bytes_run_starts_from_the_template(three_tours):
    template = _template_bytes()
    generate_report_bytes(template, three_tours)
    out = generate_report_bytes(template, dispatch({"Tour": "Solo", "Adult": 1}))
    ws = openpyxl.load_workbook(io.BytesIO(out))["EOD"]
    assert ws["B17"].value == "Solo"
    assert ws["B26"].value is None


def test_unreadable_template_bytes():
    with pytest.raises(InputShapeError):
        generate_report_bytes(b"not a workbook", dispatch({"Tour": "A", "Adult": 1}))


def test_fatal_errors_raise_before_mutation(template_wb):
    ws = template_wb["EOD"]
    with pytest.raises(InputShapeError):
        generate_report(template_wb, DispatchData(sheets=[]))
    assert ws["B17"].value == "{{tour_name}}"
    assert ws["B30"].value == "Prepared by"

    ws["B17"] = ws["D18"] = ws["E18"] = None
    with pytest.raises(TemplateConfigurationError):
        generate_report(template_wb, dispatch({"Tour": "A", "Adult": 1}))
    assert ws["B30"].value == "Prepared by"


def test_cli_writes_report(tmp_path):
    template_path = tmp_path / "template.xlsx"
    dispatch_path = tmp_path / "dispatch.xlsx"
    output_path = tmp_path / "out.xlsx"
    build_template().save(template_path)
    _dispatch_workbook(
        [
            ["Reef Snorkel", "09:00", "12:00", 12, 3],
            ["Island Drive", "10:00", "14:00", 8, 0],
            [None, None, None, None, None],
            ["Reef Snorkel", "13:00", "16:00", 2, 1],
        ]
    ).save(dispatch_path)

    code = main([str(template_path), str(dispatch_path), "-o", str(output_path)])

    assert code == 0
    ws = openpyxl.load_workbook(output_path)["EOD"]
    assert ws["B17"].value == "Reef Snorkel"
    assert (ws["D18"].value, ws["E18"].value) == (14, 4)
    assert ws["B26"].value == "Island Drive"
    assert (ws["D24"].value, ws["E24"].value) == (22, 4)


def test_cli_fails_without_writing_output(tmp_path):
    template = build_template()
    template["EOD"]["B17"] = "Tour"
    template["EOD"]["D18"] = template["EOD"]["E18"] = None
    template_path = tmp_path / "template.xlsx"
    dispatch_path = tmp_path / "dispatch.xlsx"
    output_path = tmp_path / "out.xlsx"
    template.save(template_path)
    _dispatch_workbook([["Reef", "09:00", "12:00", 1, 0]]).save(dispatch_path)

    code = main([str(template_path), str(dispatch_path), "-o", str(output_path)])

    assert code == 1
    assert not output_path.exists()


def test_cli_missing_file(tmp_path):
    assert main([str(tmp_path / "a.xlsx"), str(tmp_path / "b.xlsx")]) == 1


@pytest.mark.parametrize("bad", ["D0", "XYZ"])
def test_invalid_summary_cell_fails_before_mutation(template_wb, three_tours, bad):
    ws = template_wb["EOD"]
    with pytest.raises(TemplateConfigurationError):
        generate_report(template_wb, three_tours, TemplateLayout(total_adult_cell=bad))
    assert ws["B17"].value == "{{tour_name}}"
    assert ws["D18"].value == "{{num_adult}}"
    assert ws["B30"].value == "Prepared by"
    assert ws.max_row == 30


def test_cli_reports_bad_environment(tmp_path, monkeypatch):
    template_path = tmp_path / "template.xlsx"
    dispatch_path = tmp_path / "dispatch.xlsx"
    output_path = tmp_path / "out.xlsx"
    build_template().save(template_path)
    _dispatch_workbook([["Reef", "09:00", "12:00", 1, 0]]).save(dispatch_path)
    monkeypatch.setenv("EOD_BLOCK_START_ROW", "seventeen")

    code = main([str(template_path), str(dispatch_path), "-o", str(output_path)])

    assert code == 1
    assert not output_path.exists()
