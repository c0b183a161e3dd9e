"""
Module: cashbook_engines.month_grid
Responsibility:
    Expand a calendar month into every one of its days, pairing each day
    with its aggregated ``DaySummary`` or a zero-filled stand-in.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - The grid holds exactly ``days_in_month`` entries (28-31, leap years
      included), one per day, day 1 first.
    - Strictly ascending by date with no gaps or duplicates.  The balance
      reconciler depends on this ordering.

Failure modes:
    - InvalidMonthError (a ValidationError) for a month outside 1-12 or a
      year outside 1-9999.  No partial grid is returned.
    - RecordOutOfScopeError (a ValidationError) when a summary is dated
      outside the requested month.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import date

from cashbook_engines.aggregation import DaySummary
from cashbook_kernel.domain.values import YearMonth
from cashbook_kernel.exceptions import RecordOutOfScopeError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.month_grid")


@dataclass(frozen=True)
class MonthGrid:
    """
    One ``DaySummary`` per calendar day of a month, ascending.

    Contract:
        Frozen dataclass built only by ``build_month_grid``.
    """

    year_month: YearMonth
    days: tuple[DaySummary, ...]

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[DaySummary]:
        return iter(self.days)

    @property
    def active_day_count(self) -> int:
        """Days with at least one underlying record."""
        return sum(1 for day in self.days if not day.is_empty)


def build_month_grid(
    year: int,
    month: int,
    summaries: Mapping[date, DaySummary],
) -> MonthGrid:
    """
    Build the gap-filled grid for (year, month).

    Args:
        year: Calendar year.
        month: Calendar month, 1-12.
        summaries: Daily aggregator output (date -> DaySummary).

    Returns:
        MonthGrid with one entry per calendar day.
    """
    year_month = YearMonth(year, month)

    for day in summaries:
        if not year_month.contains(day):
            raise RecordOutOfScopeError(
                "date", day, f"summary dated outside {year_month}"
            )

    days = tuple(
        summaries.get(day) or DaySummary.zero(day)
        for day in year_month.days()
    )

    logger.debug("month_grid_built", extra={
        "year_month": str(year_month),
        "day_count": len(days),
        "gap_filled_days": len(days) - len(summaries),
    })
    return MonthGrid(year_month=year_month, days=days)
