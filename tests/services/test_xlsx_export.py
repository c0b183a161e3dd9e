"""Tests for the spreadsheet export of monthly reports."""

from dataclasses import replace
from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook

from cashbook_config.schema import ExportSettings, ReconciliationSettings
from cashbook_engines.projector import EXPORT_COLUMNS
from cashbook_services.reconciliation_service import MonthlyReconciliationService
from cashbook_services.sources import InMemoryMovementSource
from cashbook_services.xlsx_export import (
    build_workbook,
    export_report_xlsx,
    report_to_xlsx_bytes,
)


def _as_date(value):
    return value.date() if isinstance(value, datetime) else value


@pytest.fixture
def report(make_record, default_config, deterministic_clock):
    records = [
        make_record(date(2024, 3, 1), gross_sales="1000", card_payment="200",
                    expenses="100", manual_deposit="300"),
        make_record(date(2024, 3, 2), gross_sales="250.555", credit="10",
                    credit_repayments="5"),
    ]
    service = MonthlyReconciliationService(
        InMemoryMovementSource(records), default_config, deterministic_clock,
    )
    return service.reconcile(7, "2024-03")


class TestBuildWorkbook:
    """Worksheet layout."""

    def test_header_row(self, report, default_config):
        ws = build_workbook(report, default_config.export).active

        headers = [ws.cell(row=1, column=c).value for c in range(1, len(EXPORT_COLUMNS) + 1)]
        assert headers == [default_config.export.label_for(name) for name in EXPORT_COLUMNS]
        assert headers[-1] == "Saldo Acumulado"
        assert ws.cell(row=1, column=1).font.bold

    def test_one_row_per_day_plus_totals(self, report, default_config):
        ws = build_workbook(report, default_config.export).active

        assert ws.max_row == 1 + 31 + 1
        assert ws.max_column == 11
        assert ws.cell(row=33, column=1).value == default_config.export.totals_label
        assert ws.freeze_panes == "A2"

    def test_unlabelled_columns_use_names(self, report):
        ws = build_workbook(report, ExportSettings()).active
        assert ws.cell(row=1, column=2).value == "gross_sales"
        assert ws.title == "Movimientos"

    def test_long_sheet_title_truncated(self, report):
        ws = build_workbook(report, ExportSettings(sheet_title="x" * 40)).active
        assert len(ws.title) == 31


class TestExportRoundTrip:
    """Values read back from the saved file."""

    def _sheet(self, report, settings):
        wb = load_workbook(BytesIO(report_to_xlsx_bytes(report, settings)))
        return wb.active

    def test_day_values(self, report, default_config):
        ws = self._sheet(report, default_config.export)

        assert _as_date(ws.cell(row=2, column=1).value) == date(2024, 3, 1)
        assert ws.cell(row=2, column=2).value == pytest.approx(1000)
        assert ws.cell(row=2, column=9).value == pytest.approx(700)
        assert ws.cell(row=2, column=11).value == pytest.approx(400)
        assert ws.cell(row=3, column=2).value == pytest.approx(250.56)
        assert _as_date(ws.cell(row=32, column=1).value) == date(2024, 3, 31)

    def test_totals_row(self, report, default_config):
        ws = self._sheet(report, default_config.export)

        assert ws.cell(row=33, column=2).value == pytest.approx(1250.56)
        assert ws.cell(row=33, column=4).value == pytest.approx(5)
        assert ws.cell(row=33, column=10).value == pytest.approx(300)
        assert ws.cell(row=33, column=11).value == pytest.approx(
            float(report.summary.accumulated_balance_end_of_month), abs=0.005,
        )

    def test_number_formats(self, report, default_config):
        ws = self._sheet(report, default_config.export)
        assert ws.cell(row=2, column=2).number_format == default_config.export.number_format
        assert ws.cell(row=2, column=1).number_format == default_config.export.date_format


class TestConfiguredRounding:
    """Day rows and the totals row round the same way."""

    def test_half_even_totals_match_rows(self, make_record, default_config, deterministic_clock):
        config = replace(
            default_config,
            reconciliation=ReconciliationSettings(display_precision=2, rounding=ROUND_HALF_EVEN),
        )
        service = MonthlyReconciliationService(
            InMemoryMovementSource([make_record(date(2024, 3, 1), gross_sales="0.125")]),
            config,
            deterministic_clock,
        )
        report = service.reconcile(7, "2024-03")
        assert report.metadata.rounding == ROUND_HALF_EVEN

        ws = build_workbook(report, config.export).active

        assert ws.cell(row=2, column=2).value == Decimal("0.12")
        assert ws.cell(row=33, column=2).value == Decimal("0.12")
        assert ws.cell(row=33, column=11).value == Decimal("0.12")


class TestExportReportXlsx:
    """Writing to a path."""

    def test_writes_file_and_logs(self, report, default_config, tmp_path, captured_logs):
        path = tmp_path / "cashbook-2024-03.xlsx"

        export_report_xlsx(report, default_config.export, path)

        assert path.exists()
        assert load_workbook(path).active.max_row == 33
        events = [r for r in captured_logs() if r["message"] == "xlsx_report_exported"]
        assert events[0]["row_count"] == 31
        assert events[0]["month"] == "2024-03"
