"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value handling for all cashbook computations:
    amount coercion to ``Decimal``, date-only parsing, display rounding, and
    the ``YearMonth`` calendar-month value object.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine module. No outward dependencies except
    cashbook_kernel.exceptions.

Invariants enforced:
    - Amounts are always ``Decimal`` (never float) once past this boundary.
    - Amounts are finite, non-negative and fit Numeric(38, 9).
    - Sums run under ``exact_arithmetic()``: rounding raises, never drifts.
    - Dates carry no time-of-day: datetimes and ISO timestamps are truncated
      to their calendar date.
    - A ``YearMonth`` always names a real calendar month.

Failure modes:
    - InvalidAmountError for None, bool, NaN/Infinity, unparseable or
      negative amounts.
    - InvalidDateError for values that do not name a real calendar day.
    - InvalidMonthError for month outside 1-12 or year outside 1-9999.

Audit relevance:
    Single implicit currency: every amount is a bare Decimal. Rounding is a
    display concern only (``quantize_amount``); accumulation always runs on
    unrounded values.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import (
    ROUND_HALF_UP,
    Context,
    Decimal,
    Inexact,
    InvalidOperation,
    Rounded,
    localcontext,
)
from typing import Any

from cashbook_kernel.exceptions import (
    InvalidAmountError,
    InvalidDateError,
    InvalidMonthError,
)

ZERO = Decimal("0")

# Storable range of an amount column, Numeric(38, 9).
AMOUNT_MAX_INTEGER_DIGITS = 29
AMOUNT_MAX_PLACES = 9

# Room for month sums of maximal amounts without rounding.
_ARITHMETIC_PRECISION = 60


def to_amount(value: Any, field: str) -> Decimal:
    """
    Coerce a raw value into a non-negative, finite ``Decimal``.

    Preconditions:
        - ``value`` is a Decimal, int, numeric string, or float. Floats are
          converted through ``str()`` so 0.1 becomes Decimal("0.1").

    Postconditions:
        - Returns a finite Decimal >= 0.

    Raises:
        InvalidAmountError: naming ``field`` when the value is missing,
            not numeric, not finite, negative, or outside the storable
            range (29 integer digits, 9 decimal places).
    """
    if value is None:
        raise InvalidAmountError(field, value, "amount is required")
    if isinstance(value, bool):
        raise InvalidAmountError(field, value, "amount must be numeric")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        text = str(value).strip()
        if not text:
            raise InvalidAmountError(field, value, "amount is required")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidAmountError(field, value, "amount must be numeric") from exc
    else:
        raise InvalidAmountError(field, value, "amount must be numeric")

    if not amount.is_finite():
        raise InvalidAmountError(field, value, "amount must be finite")
    if amount < ZERO:
        raise InvalidAmountError(field, value, "amount cannot be negative")
    if amount:
        exponent = amount.as_tuple().exponent
        if exponent < -AMOUNT_MAX_PLACES:
            raise InvalidAmountError(
                field, value, f"amount has more than {AMOUNT_MAX_PLACES} decimal places"
            )
        if amount.adjusted() >= AMOUNT_MAX_INTEGER_DIGITS:
            raise InvalidAmountError(
                field, value, f"amount has more than {AMOUNT_MAX_INTEGER_DIGITS} integer digits"
            )
    return amount


@contextmanager
def exact_arithmetic() -> Iterator[Context]:
    """
    Decimal context for summing amounts: wide precision, rounding traps.

    Any operation that would round raises ``decimal.Inexact`` instead of
    losing digits.
    """
    with localcontext() as ctx:
        ctx.prec = _ARITHMETIC_PRECISION
        ctx.traps[Inexact] = True
        ctx.traps[Rounded] = True
        yield ctx


def parse_calendar_date(value: Any, field: str = "date") -> date:
    """
    Parse a calendar date, discarding any time-of-day component.

    Accepts ``date``, ``datetime`` (truncated), ``YYYY-MM-DD`` strings, and
    ISO timestamps such as ``2024-03-01T15:30:00.000Z`` (the part before
    ``T`` is used, so no timezone shift can move the record to another day).

    Raises:
        InvalidDateError: naming ``field`` when the value is not a real day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "T" in text:
            text = text.split("T", 1)[0]
        elif " " in text:
            text = text.split(" ", 1)[0]
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateError(field, value, "not a calendar date") from exc
    raise InvalidDateError(field, value, "not a calendar date")


def quantize_amount(
    amount: Decimal,
    places: int = 2,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """Round an amount for display. Never feed the result back into a fold."""
    with localcontext() as ctx:
        ctx.prec = _ARITHMETIC_PRECISION
        exponent = Decimal(1).scaleb(-places)
        return amount.quantize(exponent, rounding=rounding)


@dataclass(frozen=True, slots=True, order=True)
class YearMonth:
    """
    A calendar month.

    Contract:
        Pairs a year (1-9999) with a month (1-12). Validated on construction.

    Guarantees:
        - Immutable, hashable and ordered chronologically.
        - ``days()`` yields every calendar day, ascending, leap years included.

    Non-goals:
        - Does NOT carry a timezone; months are calendar months.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise InvalidMonthError("year", self.year, "year must be an integer")
        if isinstance(self.month, bool) or not isinstance(self.month, int):
            raise InvalidMonthError("month", self.month, "month must be an integer")
        if not 1 <= self.year <= 9999:
            raise InvalidMonthError("year", self.year, "year must be between 1 and 9999")
        if not 1 <= self.month <= 12:
            raise InvalidMonthError("month", self.month, "month must be between 1 and 12")

    @classmethod
    def parse(cls, value: str) -> YearMonth:
        """Parse ``YYYY-MM``; a full ``YYYY-MM-DD`` date names its month."""
        if not isinstance(value, str):
            raise InvalidMonthError("year_month", value, "expected YYYY-MM")
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise InvalidMonthError("year_month", value, "expected YYYY-MM")
        try:
            year, month = int(parts[0]), int(parts[1])
        except ValueError as exc:
            raise InvalidMonthError("year_month", value, "expected YYYY-MM") from exc
        year_month = cls(year, month)
        if len(parts) == 3:
            try:
                day = int(parts[2])
            except ValueError as exc:
                raise InvalidMonthError("year_month", value, "expected YYYY-MM") from exc
            if not 1 <= day <= year_month.days_in_month:
                raise InvalidMonthError("year_month", value, "day outside the month")
        return year_month

    @classmethod
    def coerce(cls, value: YearMonth | str | tuple[int, int]) -> YearMonth:
        """Accept a YearMonth, a ``YYYY-MM`` string, or a (year, month) tuple."""
        if isinstance(value, YearMonth):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, tuple) and len(value) == 2:
            return cls(value[0], value[1])
        raise InvalidMonthError("year_month", value, "expected YYYY-MM")

    @classmethod
    def of(cls, day: date) -> YearMonth:
        """The month containing ``day``."""
        return cls(day.year, day.month)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    def days(self) -> Iterator[date]:
        """Every calendar day of the month, ascending."""
        day = self.first_day
        for _ in range(self.days_in_month):
            yield day
            day += timedelta(days=1)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
