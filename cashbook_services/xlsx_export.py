"""
Spreadsheet export of a monthly report (``cashbook_services.xlsx_export``).

Layout
------
Row 1 holds the header labels from ``ExportSettings.column_labels``, in
``EXPORT_COLUMNS`` order.  One row per calendar day follows, then a totals
row: category totals and the summed day balance, with the month-end
accumulated balance under ``accumulated_balance``.

Values are written as the report's Decimal values (already rounded for
display) with the configured number format; dates use the configured date
format.  The totals row rounds exact totals with the report's precision and
rounding mode, the same as the day rows.  Nothing is recomputed here.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import BinaryIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from cashbook_config.schema import ExportSettings
from cashbook_engines.projector import AMOUNT_COLUMNS, EXPORT_COLUMNS
from cashbook_kernel.domain.values import quantize_amount
from cashbook_kernel.logging_config import get_logger
from cashbook_services.reconciliation_service import MonthlyReport

logger = get_logger("services.xlsx_export")

_DATE_COLUMN_WIDTH = 12
_AMOUNT_COLUMN_WIDTH = 16


def _totals_values(report: MonthlyReport) -> dict[str, object]:
    precision = report.metadata.display_precision
    rounding = report.metadata.rounding
    values: dict[str, object] = {
        name: quantize_amount(amount, precision, rounding)
        for name, amount in report.category_totals.items()
    }
    values["accumulated_balance"] = quantize_amount(
        report.summary.accumulated_balance_end_of_month, precision, rounding,
    )
    return values


def build_workbook(report: MonthlyReport, settings: ExportSettings) -> Workbook:
    """Lay out one monthly report on a single worksheet."""
    wb = Workbook()
    ws = wb.active
    ws.title = settings.sheet_title[:31]

    bold = Font(bold=True)
    for col, name in enumerate(EXPORT_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=settings.label_for(name))
        cell.font = bold

    row_idx = 1
    for row_idx, export_row in enumerate(report.rows, start=2):
        for col, value in enumerate(export_row.as_tuple(), start=1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.number_format = settings.date_format if col == 1 else settings.number_format

    totals_row = row_idx + 1
    ws.cell(row=totals_row, column=1, value=settings.totals_label).font = bold
    totals = _totals_values(report)
    for col, name in enumerate(EXPORT_COLUMNS, start=1):
        if name not in AMOUNT_COLUMNS:
            continue
        cell = ws.cell(row=totals_row, column=col, value=totals[name])
        cell.number_format = settings.number_format
        cell.font = bold

    ws.column_dimensions[get_column_letter(1)].width = _DATE_COLUMN_WIDTH
    for col in range(2, len(EXPORT_COLUMNS) + 1):
        ws.column_dimensions[get_column_letter(col)].width = _AMOUNT_COLUMN_WIDTH
    ws.freeze_panes = "A2"
    return wb


def export_report_xlsx(
    report: MonthlyReport,
    settings: ExportSettings,
    destination: Path | str | BinaryIO,
) -> None:
    """Write the report as ``.xlsx`` to a path or a binary stream."""
    wb = build_workbook(report, settings)
    target = str(destination) if isinstance(destination, (str, Path)) else destination
    wb.save(target)

    logger.info(
        "xlsx_report_exported",
        extra={
            "branch": str(report.metadata.branch_id),
            "month": str(report.metadata.year_month),
            "row_count": len(report.rows),
        },
    )


def report_to_xlsx_bytes(report: MonthlyReport, settings: ExportSettings) -> bytes:
    """Return the ``.xlsx`` file content, e.g. for an HTTP download."""
    buffer = BytesIO()
    export_report_xlsx(report, settings, buffer)
    return buffer.getvalue()
