"""Pure domain values for the cashbook kernel (zero I/O)."""

from cashbook_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from cashbook_kernel.domain.values import (
    ZERO,
    YearMonth,
    parse_calendar_date,
    quantize_amount,
    to_amount,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ZERO",
    "YearMonth",
    "parse_calendar_date",
    "quantize_amount",
    "to_amount",
]
