"""
EOD report generator: library entry points and CLI.

Usage:
    python generator.py <template.xlsx> <dispatch.xlsx> [--output <out.xlsx>]
                        [--sheet <template_sheet>] [--summary]

One run: extract tour records from the dispatch workbook, validate the
configured tour block in the template, lay out one bound section per
tour, write the passenger totals, and save.  Every run works on its own
freshly loaded template workbook; on failure nothing is written.
"""

from __future__ import annotations

import argparse
import io
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import dotenv
import openpyxl
from openpyxl import Workbook

from aggregation import compute_totals, write_totals
from dto.dispatch import DispatchData
from dto.output import ReportResult
from errors import InputShapeError, ReportGenerationError
from extractors.dispatch_sheet import load_dispatch_file
from extractors.records import extract_tour_list
from layout import TemplateLayout, load_layout, locate_template_block, select_template_sheet
from replication import MutationContext, replicate_sections

dotenv.load_dotenv()

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Main pipeline
# -------------------------------------------------------------------


def generate_report(
    template_wb: Workbook,
    dispatch_data: DispatchData,
    layout: Optional[TemplateLayout] = None,
) -> ReportResult:
    """
    Fill *template_wb* in place from *dispatch_data*.

    Input and configuration problems raise before the workbook is touched.
    The returned ``ReportResult.workbook`` is *template_wb* itself.
    """
    layout = layout or load_layout()

    records = extract_tour_list(dispatch_data)
    ws = select_template_sheet(template_wb, layout)
    located = locate_template_block(ws, layout)

    ctx = MutationContext(ws=ws, layout=layout, located=located)
    sections = replicate_sections(ctx, records)

    totals = compute_totals(records)
    write_totals(ctx, totals)

    if ctx.style_failures:
        logger.warning(
            "%d cell style(s) could not be copied; report generated anyway",
            ctx.style_failures,
        )

    return ReportResult(
        sheet_name=ws.title,
        records=records,
        sections=sections,
        totals=totals,
        style_failures=ctx.style_failures,
        workbook=template_wb,
    )


def load_template(source) -> Workbook:
    """Load a template workbook from a path, bytes, or file-like object."""
    try:
        if isinstance(source, bytes):
            source = io.BytesIO(source)
        return openpyxl.load_workbook(source)
    except Exception as exc:
        raise InputShapeError(f"Unreadable template workbook: {exc}") from exc


def generate_report_bytes(
    template_bytes: bytes,
    dispatch_data: DispatchData,
    layout: Optional[TemplateLayout] = None,
) -> bytes:
    """Generate a report from stored template bytes and return .xlsx bytes."""
    wb = load_template(template_bytes)
    try:
        result = generate_report(wb, dispatch_data, layout)
        buf = io.BytesIO()
        result.workbook.save(buf)
        return buf.getvalue()
    finally:
        wb.close()


def generate_report_file(
    template_path: str,
    dispatch_path: str,
    output_path: str,
    layout: Optional[TemplateLayout] = None,
) -> ReportResult:
    logger.info("Loading dispatch workbook: %s", dispatch_path)
    dispatch_data = load_dispatch_file(dispatch_path)

    logger.info("Loading template workbook: %s", template_path)
    wb = load_template(template_path)
    try:
        result = generate_report(wb, dispatch_data, layout)
        result.workbook.save(output_path)
    finally:
        wb.close()

    logger.info("Output written to %s", output_path)
    return result


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fill an EOD report template from a dispatch workbook.",
    )
    parser.add_argument("template_file", help="Path to the EOD template .xlsx")
    parser.add_argument("dispatch_file", help="Path to the dispatch .xlsx")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output .xlsx path (default: <dispatch_name>_eod.xlsx)",
    )
    parser.add_argument(
        "-s",
        "--sheet",
        default=None,
        help="Template worksheet holding the tour block (default: first sheet)",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print the run summary as JSON",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    for path in (args.template_file, args.dispatch_file):
        if not os.path.isfile(path):
            logger.error("File not found: %s", path)
            return 1

    output_path = args.output or f"{Path(args.dispatch_file).stem}_eod.xlsx"

    try:
        layout = load_layout()
        if args.sheet:
            layout = layout.model_copy(update={"sheet_name": args.sheet})
        result = generate_report_file(
            args.template_file, args.dispatch_file, output_path, layout
        )
    except ReportGenerationError as exc:
        logger.error("Report generation failed: %s", exc)
        return 1

    if args.summary:
        print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
