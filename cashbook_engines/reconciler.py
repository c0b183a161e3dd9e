"""
Module: cashbook_engines.reconciler
Responsibility:
    Walk a month's day grid in date order and derive each day's
    ``day_balance`` and the running ``accumulated_balance``, then compose
    the full pipeline (records -> aggregate -> grid -> fold) into a
    ``ReconciledMonth``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The algorithmic core.

Invariants enforced:
    - day_balance = gross_sales - credit - top_ups - card_payment
                    - transfers - expenses
      ``credit_repayments`` and ``manual_deposit`` are excluded: they do not
      describe the day's own cash result.
    - accumulated_balance(day) = accumulated_balance(previous day)
                                 + day_balance(day) - manual_deposit(day)
      with the carry-in on day 1 fixed at zero.  Each month starts its
      accumulation at zero.
    - Strict left fold: one pass, each step reads only the previous
      accumulated value.  O(n) over the month.
    - ``credit_repayments`` affects no balance; it is reported only.
    - All arithmetic is unrounded Decimal under ``exact_arithmetic()``.
    - Pure: identical (branch, month, records) give equal results.

Failure modes:
    - InconsistentOrderingError if the grid is not strictly ascending.
    - RecordOutOfScopeError if a record belongs to another branch or month.
    - InvalidMonthError for a malformed year_month.

Audit relevance:
    Every ``reconcile_month`` call is traced with a fingerprint of branch,
    month and records, so two runs over the same inputs can be shown to
    match.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashbook_engines.aggregation import DaySummary, aggregate_by_day
from cashbook_engines.month_grid import MonthGrid, build_month_grid
from cashbook_engines.movement import AMOUNT_FIELDS, MovementRecord
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.values import ZERO, YearMonth, exact_arithmetic
from cashbook_kernel.exceptions import (
    InconsistentOrderingError,
    RecordOutOfScopeError,
)
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.reconciler")


@dataclass(frozen=True)
class ReconciledDay:
    """
    A ``DaySummary`` with its derived balances.

    Guarantees:
        - ``accumulated_balance`` equals the previous day's accumulated
          balance plus ``day_balance`` minus ``summary.manual_deposit``.
    """

    summary: DaySummary
    day_balance: Decimal
    accumulated_balance: Decimal

    @property
    def date(self) -> date:
        return self.summary.date

    @property
    def net_movement(self) -> Decimal:
        """This day's contribution to the running total."""
        return self.day_balance - self.summary.manual_deposit


@dataclass(frozen=True)
class CategoryTotals:
    """Month-level sum of every category across all days."""

    gross_sales: Decimal = ZERO
    credit: Decimal = ZERO
    credit_repayments: Decimal = ZERO
    top_ups: Decimal = ZERO
    card_payment: Decimal = ZERO
    transfers: Decimal = ZERO
    expenses: Decimal = ZERO
    manual_deposit: Decimal = ZERO

    def amounts(self) -> dict[str, Decimal]:
        return {name: getattr(self, name) for name in AMOUNT_FIELDS}


@dataclass(frozen=True)
class ReconciledMonth:
    """
    Reconciled day grid for one branch and month, plus month totals.

    Contract:
        Frozen dataclass; the single source for every on-screen figure and
        every exported row of a (branch, month).
    Guarantees:
        - ``days`` is strictly ascending and covers the whole month.
        - ``accumulated_balance_end_of_month`` equals the last day's
          accumulated balance.
        - ``totals`` are sums over ``days``; ``total_day_balance`` is the sum
          of day balances.
    """

    branch_id: str | int
    year_month: YearMonth
    days: tuple[ReconciledDay, ...]
    totals: CategoryTotals
    total_day_balance: Decimal
    accumulated_balance_end_of_month: Decimal

    def __iter__(self) -> Iterator[ReconciledDay]:
        return iter(self.days)

    def __len__(self) -> int:
        return len(self.days)

    def day(self, day: date) -> ReconciledDay:
        """Look up one day by date."""
        index = (day - self.year_month.first_day).days
        if not self.year_month.contains(day) or not 0 <= index < len(self.days):
            raise KeyError(day)
        return self.days[index]


def compute_day_balance(summary: DaySummary) -> Decimal:
    """Cash that should remain after non-cash settlements and till expenses."""
    return (
        summary.gross_sales
        - summary.credit
        - summary.top_ups
        - summary.card_payment
        - summary.transfers
        - summary.expenses
    )


def _assert_ascending(grid: MonthGrid) -> None:
    previous: date | None = None
    for position, summary in enumerate(grid.days):
        if previous is not None and summary.date <= previous:
            raise InconsistentOrderingError(previous, summary.date, position)
        previous = summary.date


def reconcile_grid(grid: MonthGrid, branch_id: str | int) -> ReconciledMonth:
    """
    Fold the grid into day and accumulated balances.

    Args:
        grid: Gap-filled, ascending month grid.
        branch_id: Branch the grid belongs to (carried into the result).

    Returns:
        ReconciledMonth.

    Raises:
        InconsistentOrderingError: If the grid is not strictly ascending.
    """
    _assert_ascending(grid)

    accumulated = ZERO
    total_day_balance = ZERO
    category_sums = {name: ZERO for name in AMOUNT_FIELDS}
    reconciled: list[ReconciledDay] = []

    with exact_arithmetic():
        for summary in grid.days:
            day_balance = compute_day_balance(summary)
            accumulated = accumulated + day_balance - summary.manual_deposit
            total_day_balance += day_balance
            for name in AMOUNT_FIELDS:
                category_sums[name] += getattr(summary, name)
            reconciled.append(ReconciledDay(
                summary=summary,
                day_balance=day_balance,
                accumulated_balance=accumulated,
            ))

    return ReconciledMonth(
        branch_id=branch_id,
        year_month=grid.year_month,
        days=tuple(reconciled),
        totals=CategoryTotals(**category_sums),
        total_day_balance=total_day_balance,
        accumulated_balance_end_of_month=accumulated,
    )


def _check_scope(
    records: list[MovementRecord],
    branch_id: str | int,
    year_month: YearMonth,
) -> None:
    # Branch ids compare by string form: 7 and "7" name the same branch.
    expected = str(branch_id)
    for record in records:
        if str(record.branch_id) != expected:
            raise RecordOutOfScopeError(
                "branch_id", record.branch_id, f"record belongs to another branch than {branch_id!r}"
            )
        if not year_month.contains(record.date):
            raise RecordOutOfScopeError(
                "date", record.date, f"record dated outside {year_month}"
            )


@traced_engine(
    "reconciler", "1.0",
    fingerprint_fields=("branch_id", "year_month", "records"),
)
def reconcile_month(
    branch_id: str | int,
    year_month: YearMonth | str | tuple[int, int],
    records: Iterable[MovementRecord],
) -> ReconciledMonth:
    """
    Reconcile one branch's month from its raw movement records.

    Args:
        branch_id: Branch being reconciled.
        year_month: ``YearMonth``, ``"YYYY-MM"`` or ``(year, month)``.
        records: Every movement of that branch in that month (may be empty).

    Returns:
        ReconciledMonth covering every day of the month.

    Raises:
        InvalidMonthError: If year_month does not name a calendar month.
        RecordOutOfScopeError: If any record is for another branch or month.
    """
    target = YearMonth.coerce(year_month)
    materialized = list(records)
    _check_scope(materialized, branch_id, target)

    summaries = aggregate_by_day(records=materialized)
    grid = build_month_grid(target.year, target.month, summaries)
    result = reconcile_grid(grid, branch_id)

    logger.debug("month_reconciled", extra={
        "branch": str(branch_id),
        "month": str(target),
        "record_count": len(materialized),
        "active_days": grid.active_day_count,
        "accumulated_balance_end_of_month": result.accumulated_balance_end_of_month,
    })
    return result
