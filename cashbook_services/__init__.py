"""
cashbook_services -- Orchestration over the pure reconciliation engines.

Provides movement sources (in-memory, JSON export, database selector), the
monthly reconciliation service, and the spreadsheet export.
"""

from cashbook_services.reconciliation_service import (
    MonthlyReconciliationService,
    MonthlyReport,
    ReportMetadata,
)
from cashbook_services.sources import (
    InMemoryMovementSource,
    JsonFileMovementSource,
    MovementSelector,
    MovementSource,
)
from cashbook_services.xlsx_export import (
    build_workbook,
    export_report_xlsx,
    report_to_xlsx_bytes,
)

__all__ = [
    "InMemoryMovementSource",
    "JsonFileMovementSource",
    "MonthlyReconciliationService",
    "MonthlyReport",
    "MovementSelector",
    "MovementSource",
    "ReportMetadata",
    "build_workbook",
    "export_report_xlsx",
    "report_to_xlsx_bytes",
]
