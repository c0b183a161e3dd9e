"""
Module: cashbook_engines.aggregation
Responsibility:
    Fold the movement records of one branch into one ``DaySummary`` per
    calendar date that has at least one record.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Grouping key is the exact calendar date (time of day never exists
      past ``MovementRecord``).
    - Each field is summed by plain Decimal addition: no weighting, no
      de-duplication, no "last write wins".  Sums are exact; a sum that
      would round raises ``decimal.Inexact``.
    - Dates without records are NOT emitted; gap-filling is the month grid's
      job.
    - Output is ordered by ascending date.

Failure modes:
    - None beyond the ValidationError raised while building records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashbook_engines.movement import AMOUNT_FIELDS, MovementRecord
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.values import ZERO, exact_arithmetic
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")


@dataclass(frozen=True)
class DaySummary:
    """
    Category sums for one calendar date within one branch.

    Contract:
        Frozen dataclass; amounts are unrounded Decimal sums.
    Guarantees:
        - ``record_count`` is the number of records folded in (0 for a
          gap-filled day).
    Non-goals:
        - Carries no balances; those are derived by the reconciler.
    """

    date: date
    gross_sales: Decimal = ZERO
    credit: Decimal = ZERO
    credit_repayments: Decimal = ZERO
    top_ups: Decimal = ZERO
    card_payment: Decimal = ZERO
    transfers: Decimal = ZERO
    expenses: Decimal = ZERO
    manual_deposit: Decimal = ZERO
    record_count: int = 0

    @classmethod
    def zero(cls, day: date) -> DaySummary:
        """A gap-filled summary: every sum zero, no records."""
        return cls(date=day)

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0

    def amounts(self) -> dict[str, Decimal]:
        """All category sums keyed by ``AMOUNT_FIELDS`` name."""
        return {name: getattr(self, name) for name in AMOUNT_FIELDS}


@traced_engine("daily_aggregator", "1.0", fingerprint_fields=("records",))
def aggregate_by_day(records: Iterable[MovementRecord]) -> dict[date, DaySummary]:
    """
    Group records by date and sum every category.

    Args:
        records: Unordered movement records for one branch.

    Returns:
        Mapping of date -> DaySummary, ascending by date, containing only
        dates that had at least one record.
    """
    sums: dict[date, dict[str, Decimal]] = {}
    counts: dict[date, int] = {}

    with exact_arithmetic():
        for record in records:
            day_sums = sums.get(record.date)
            if day_sums is None:
                day_sums = {name: ZERO for name in AMOUNT_FIELDS}
                sums[record.date] = day_sums
                counts[record.date] = 0
            for name, amount in record.amounts().items():
                day_sums[name] += amount
            counts[record.date] += 1

    result = {
        day: DaySummary(date=day, record_count=counts[day], **sums[day])
        for day in sorted(sums)
    }

    logger.debug("records_aggregated", extra={
        "record_count": sum(counts.values()),
        "day_count": len(result),
    })
    return result
