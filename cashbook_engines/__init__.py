"""
Module: cashbook_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    reconciliation engines.  This is the canonical import surface for the
    services layer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import cashbook_kernel (domain values, exceptions, logging)
    and sibling engine modules.  MUST NOT import cashbook_services.

Invariants enforced:
    - Purity: engines never read the clock, the filesystem or a database.
    - Decimal-only arithmetic: floats never reach a sum.
    - Determinism: identical inputs always produce equal outputs.

Audit relevance:
    Engine entry points are traced via ``@traced_engine`` (see
    ``cashbook_engines.tracer``), emitting CASHBOOK_ENGINE_TRACE records.

Usage:
    from cashbook_engines import (
        MovementRecord, reconcile_month, project_summary, project_export_rows,
    )

    reconciled = reconcile_month(branch_id=7, year_month="2024-03", records=records)
    summary = project_summary(reconciled)
    rows = project_export_rows(reconciled)
"""

from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines")

from cashbook_engines.aggregation import DaySummary, aggregate_by_day
from cashbook_engines.month_grid import MonthGrid, build_month_grid
from cashbook_engines.movement import (
    AMOUNT_FIELDS,
    MovementRecord,
    PaymentBreakdown,
    PaymentCategory,
)
from cashbook_engines.projector import (
    EXPORT_COLUMNS,
    ExportRow,
    MonthSummary,
    project_category_totals,
    project_export_rows,
    project_summary,
    render_to_dict,
)
from cashbook_engines.reconciler import (
    CategoryTotals,
    ReconciledDay,
    ReconciledMonth,
    compute_day_balance,
    reconcile_grid,
    reconcile_month,
)
from cashbook_engines.tracer import traced_engine

__all__ = [
    # Movement
    "AMOUNT_FIELDS",
    "MovementRecord",
    "PaymentBreakdown",
    "PaymentCategory",
    # Aggregation
    "DaySummary",
    "aggregate_by_day",
    # Month grid
    "MonthGrid",
    "build_month_grid",
    # Reconciler
    "CategoryTotals",
    "ReconciledDay",
    "ReconciledMonth",
    "compute_day_balance",
    "reconcile_grid",
    "reconcile_month",
    # Projector
    "EXPORT_COLUMNS",
    "ExportRow",
    "MonthSummary",
    "project_category_totals",
    "project_export_rows",
    "project_summary",
    "render_to_dict",
    # Tracing
    "traced_engine",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 6,
    "modules": [
        "movement", "aggregation", "month_grid", "reconciler",
        "projector", "tracer",
    ],
})
