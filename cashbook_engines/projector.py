"""
Pure reporting projections over a ``ReconciledMonth``.

These functions turn one reconciled month into the shapes the back office
shows and exports: a month summary, fixed-column export rows, and
per-category totals. ZERO I/O. ZERO side effects.

Every projection reads the same ``ReconciledMonth`` instance, so the
on-screen summary and the exported report cannot disagree.  Rounding is
applied here for display only; the reconciler never sees rounded values.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID

from cashbook_engines.reconciler import ReconciledDay, ReconciledMonth
from cashbook_kernel.domain.values import YearMonth, exact_arithmetic, quantize_amount

# =========================================================================
# Types
# =========================================================================

# Export column order. Downstream spreadsheets rely on it.
EXPORT_COLUMNS: tuple[str, ...] = (
    "date",
    "gross_sales",
    "credit",
    "credit_repayments",
    "top_ups",
    "card_payment",
    "transfers",
    "expenses",
    "day_balance",
    "manual_deposit",
    "accumulated_balance",
)

# Numeric export columns (everything but ``date``).
AMOUNT_COLUMNS: tuple[str, ...] = EXPORT_COLUMNS[1:]


@dataclasses.dataclass(frozen=True)
class MonthSummary:
    """Month-level figures shown above the day grid."""

    total_sales: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    accumulated_balance_end_of_month: Decimal
    day_count: int


@dataclasses.dataclass(frozen=True)
class ExportRow:
    """One export line per calendar day, fields in ``EXPORT_COLUMNS`` order."""

    date: date
    gross_sales: Decimal
    credit: Decimal
    credit_repayments: Decimal
    top_ups: Decimal
    card_payment: Decimal
    transfers: Decimal
    expenses: Decimal
    day_balance: Decimal
    manual_deposit: Decimal
    accumulated_balance: Decimal

    def as_tuple(self) -> tuple:
        return tuple(getattr(self, name) for name in EXPORT_COLUMNS)

    def as_dict(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in EXPORT_COLUMNS}


# =========================================================================
# Projections
# =========================================================================


def project_summary(reconciled: ReconciledMonth) -> MonthSummary:
    """
    Summarize a reconciled month.

    ``net_balance`` is sales minus expenses only; it deliberately ignores the
    payment categories and deposits, matching the back-office month header.
    """
    totals = reconciled.totals
    with exact_arithmetic():
        net_balance = totals.gross_sales - totals.expenses
    return MonthSummary(
        total_sales=totals.gross_sales,
        total_expenses=totals.expenses,
        net_balance=net_balance,
        accumulated_balance_end_of_month=reconciled.accumulated_balance_end_of_month,
        day_count=len(reconciled.days),
    )


def _row_for(
    day: ReconciledDay,
    places: int | None,
    rounding: str,
) -> ExportRow:
    summary = day.summary
    values = {
        "gross_sales": summary.gross_sales,
        "credit": summary.credit,
        "credit_repayments": summary.credit_repayments,
        "top_ups": summary.top_ups,
        "card_payment": summary.card_payment,
        "transfers": summary.transfers,
        "expenses": summary.expenses,
        "day_balance": day.day_balance,
        "manual_deposit": summary.manual_deposit,
        "accumulated_balance": day.accumulated_balance,
    }
    if places is not None:
        values = {
            name: quantize_amount(amount, places, rounding)
            for name, amount in values.items()
        }
    return ExportRow(date=day.date, **values)


def project_export_rows(
    reconciled: ReconciledMonth,
    places: int | None = 2,
    rounding: str = ROUND_HALF_UP,
) -> tuple[ExportRow, ...]:
    """
    One ``ExportRow`` per calendar day, ascending.

    Args:
        reconciled: Output of the reconciler.
        places: Decimal places for display rounding; ``None`` keeps the
            exact unrounded values.
        rounding: ``decimal`` rounding mode.
    """
    return tuple(_row_for(day, places, rounding) for day in reconciled.days)


def project_category_totals(reconciled: ReconciledMonth) -> dict[str, Decimal]:
    """Month totals keyed by export column name (``accumulated_balance`` excluded)."""
    totals = reconciled.totals.amounts()
    totals["day_balance"] = reconciled.total_day_balance
    return {
        name: totals[name]
        for name in AMOUNT_COLUMNS
        if name in totals
    }


# =========================================================================
# Serialization
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any projector or reconciler dataclass to plain JSON-safe data.

    Handles:
    - Decimal -> str (preserving precision)
    - date -> ISO format string
    - YearMonth -> "YYYY-MM"
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, YearMonth):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
