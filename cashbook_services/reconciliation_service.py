"""
Monthly reconciliation service (``cashbook_services.reconciliation_service``).

Responsibility
--------------
Fetches one branch's movements for one month from a ``MovementSource``,
runs the pure reconciliation pipeline, and assembles every projection the
back office needs into a single ``MonthlyReport``.

Architecture position
---------------------
**Services layer** -- thin glue.  Constructor: ``source`` + ``config`` +
``clock``.  No financial logic lives here; it only calls the engines.

Invariants enforced
-------------------
* Read-only -- sources are never written to.
* Summary, export rows and category totals are all projected from the SAME
  ``ReconciledMonth`` instance, so screen and export cannot disagree.
* Report metadata carries the generation timestamp from the injected clock.

Failure modes
-------------
* Source failures (I/O, DB) propagate unchanged.
* ``ValidationError`` / ``InconsistentOrderingError`` from the engines
  propagate unchanged after being logged once with their context.

Audit relevance
---------------
Each report carries the config checksum that governed rounding and
labels, and a structured ``monthly_reconciliation_generated`` log event.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import uuid4

from cashbook_config.schema import CashbookConfig
from cashbook_engines.projector import (
    ExportRow,
    MonthSummary,
    project_category_totals,
    project_export_rows,
    project_summary,
)
from cashbook_engines.reconciler import ReconciledMonth, reconcile_month
from cashbook_kernel.domain.clock import Clock, SystemClock
from cashbook_kernel.domain.values import YearMonth
from cashbook_kernel.exceptions import CashbookError
from cashbook_kernel.logging_config import LogContext, get_logger
from cashbook_services.sources import MovementSource

logger = get_logger("services.reconciliation")


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every monthly report."""

    branch_id: str | int
    year_month: YearMonth
    generated_at: str  # ISO format timestamp from injected clock
    record_count: int
    display_precision: int
    rounding: str  # decimal rounding mode applied to display values
    config_checksum: str


@dataclass(frozen=True)
class MonthlyReport:
    """
    Everything shown on screen and exported for one branch-month.

    ``summary`` and ``category_totals`` are exact.  ``rows`` are rounded per
    day to ``metadata.display_precision``, so with sub-cent inputs the sum
    of a rounded column can differ from its exact total.  ``exact_rows()``
    gives the unrounded rows whose column sums equal the summary.
    """

    metadata: ReportMetadata
    reconciled: ReconciledMonth
    summary: MonthSummary
    rows: tuple[ExportRow, ...]
    category_totals: dict[str, Decimal]

    def exact_rows(self) -> tuple[ExportRow, ...]:
        """Export rows without display rounding."""
        return project_export_rows(self.reconciled, places=None)


class MonthlyReconciliationService:
    """
    Monthly reconciliation report generation.

    Contract
    --------
    * ``reconcile()`` returns a ``MonthlyReport`` for any valid
      (branch, month), including months without a single movement.

    Guarantees
    ----------
    * Delegates all arithmetic to ``cashbook_engines``.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT cache reports; every call recomputes from the source.
    * Does NOT authorize the caller for the branch.
    """

    def __init__(
        self,
        source: MovementSource,
        config: CashbookConfig,
        clock: Clock | None = None,
    ):
        self._source = source
        self._config = config
        self._clock = clock or SystemClock()

        logger.info(
            "reconciliation_service_initialized",
            extra={
                "source": type(source).__name__,
                "config_set_id": config.config_id,
            },
        )

    def reconcile(
        self,
        branch_id: str | int,
        year_month: YearMonth | str | tuple[int, int],
    ) -> MonthlyReport:
        """
        Build the monthly report for one branch.

        Args:
            branch_id: Branch to reconcile.
            year_month: Month to reconcile (``YearMonth`` or ``"YYYY-MM"``).

        Returns:
            MonthlyReport.
        """
        target = YearMonth.coerce(year_month)
        settings = self._config.reconciliation

        with LogContext.bind(
            correlation_id=str(uuid4()),
            branch_id=str(branch_id),
            year_month=str(target),
        ):
            records = self._source.fetch_movements(branch_id, target)
            try:
                reconciled = reconcile_month(
                    branch_id=branch_id,
                    year_month=target,
                    records=records,
                )
            except CashbookError as exc:
                logger.error(
                    "monthly_reconciliation_failed",
                    extra={"error_code": exc.code},
                    exc_info=True,
                )
                raise

            metadata = ReportMetadata(
                branch_id=branch_id,
                year_month=target,
                generated_at=self._clock.now().isoformat(),
                record_count=len(records),
                display_precision=settings.display_precision,
                rounding=settings.rounding,
                config_checksum=self._config.checksum,
            )
            report = MonthlyReport(
                metadata=metadata,
                reconciled=reconciled,
                summary=project_summary(reconciled),
                rows=project_export_rows(
                    reconciled,
                    places=settings.display_precision,
                    rounding=settings.rounding,
                ),
                category_totals=project_category_totals(reconciled),
            )

            logger.info(
                "monthly_reconciliation_generated",
                extra={
                    "record_count": len(records),
                    "day_count": report.summary.day_count,
                    "accumulated_balance_end_of_month": str(
                        report.summary.accumulated_balance_end_of_month
                    ),
                },
            )
        return report
