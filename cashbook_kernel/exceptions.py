"""
Typed Exception Hierarchy for the Cashbook Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Reconciliation callers (the back-office API, the export job) must react to
bad input precisely. Parsing message strings is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (the offending field and value)

Example:
    try:
        reconciled = reconcile_month(branch_id=7, year_month="2024-13", records=[])
    except InvalidMonthError as e:
        api_response(status=400, code=e.code, field=e.field)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CashbookError (base)
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- InvalidDateError
    |   +-- InvalidMonthError
    |   +-- RecordOutOfScopeError
    |
    +-- ReconciliationError
    |   +-- InconsistentOrderingError
    |
    +-- ConfigurationError
    |
    +-- IngestionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|------------------------------------
Validation      | VALIDATION_ERROR       | Missing or malformed field
                | INVALID_AMOUNT         | Negative / non-numeric amount
                | INVALID_DATE           | Date does not parse to a real day
                | INVALID_MONTH          | Month outside 1-12 / bad year
                | RECORD_OUT_OF_SCOPE    | Record for another branch or month
----------------|------------------------|------------------------------------
Reconciliation  | INCONSISTENT_ORDERING  | Grid not strictly ascending by date
----------------|------------------------|------------------------------------
Configuration   | CONFIGURATION_ERROR    | YAML config missing keys / invalid
----------------|------------------------|------------------------------------
Ingestion       | INGESTION_ERROR        | API payload cannot be mapped

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Domain exceptions inherit from Exception, not ValueError, so they can be
   caught as a group without mixing in programming errors.

2. ``code`` is a class attribute: static per type, readable without an
   instance.

3. The reconciliation core never catches these. They propagate to the
   hosting application, which owns user-visible failure behavior.
"""

from __future__ import annotations

from datetime import date
from typing import Any


class CashbookError(Exception):
    """
    Base exception for all cashbook errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "CASHBOOK_ERROR"


# Validation exceptions


class ValidationError(CashbookError):
    """Malformed input rejected at a component boundary."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, value: Any = None, reason: str | None = None):
        self.field = field
        self.value = value
        self.reason = reason or "invalid value"
        super().__init__(f"Invalid {field}: {self.reason} (got {value!r})")


class InvalidAmountError(ValidationError):
    """Amount is missing, not numeric, not finite, or negative."""

    code: str = "INVALID_AMOUNT"


class InvalidDateError(ValidationError):
    """Value does not parse to a real calendar date."""

    code: str = "INVALID_DATE"


class InvalidMonthError(ValidationError):
    """(year, month) pair does not name a calendar month."""

    code: str = "INVALID_MONTH"


class RecordOutOfScopeError(ValidationError):
    """
    A movement belongs to a different branch or month than the one
    being reconciled.
    """

    code: str = "RECORD_OUT_OF_SCOPE"


# Reconciliation exceptions


class ReconciliationError(CashbookError):
    """Base exception for balance reconciliation errors."""

    code: str = "RECONCILIATION_ERROR"


class InconsistentOrderingError(ReconciliationError):
    """
    The day grid handed to the reconciler is not strictly ascending.

    Folding an unordered grid would silently produce wrong accumulated
    balances, so the reconciler refuses it.
    """

    code: str = "INCONSISTENT_ORDERING"

    def __init__(self, previous_date: date, current_date: date, position: int):
        self.previous_date = previous_date
        self.current_date = current_date
        self.position = position
        super().__init__(
            f"Day grid not strictly ascending at position {position}: "
            f"{current_date.isoformat()} follows {previous_date.isoformat()}"
        )


# Configuration exceptions


class ConfigurationError(CashbookError):
    """Configuration file is missing required keys or holds invalid values."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


# Ingestion exceptions


class IngestionError(CashbookError):
    """A raw API/file record cannot be mapped into a movement record."""

    code: str = "INGESTION_ERROR"

    def __init__(self, reason: str, row: int | None = None):
        self.reason = reason
        self.row = row
        location = f" (row {row})" if row is not None else ""
        super().__init__(f"Cannot ingest record{location}: {reason}")
