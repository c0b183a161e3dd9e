"""
Module: cashbook_engines.movement
Responsibility:
    Canonical representation of one financial event recorded at a branch
    on one calendar date: a sale, an expense, a manual deposit, or a
    non-cash payment (credit, credit repayment, phone top-up, card,
    bank transfer).

Architecture position:
    Engines -- pure value objects, zero I/O.
    May only import cashbook_kernel (domain values, exceptions).

Invariants enforced:
    - ``date`` is a real calendar date with no time-of-day component.
    - Every amount is present, a finite Decimal, and >= 0.
    - Single implicit currency.

Failure modes:
    - ValidationError subclasses (InvalidDateError, InvalidAmountError)
      naming the offending field.  Nothing is silently coerced to zero.

Usage:
    from cashbook_engines.movement import MovementRecord, PaymentBreakdown

    record = MovementRecord(
        date=date(2024, 3, 1),
        branch_id=7,
        gross_sales=Decimal("1000"),
        payment=PaymentBreakdown(card_payment=Decimal("200")),
        expenses=Decimal("100"),
        manual_deposit=Decimal("300"),
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from cashbook_kernel.domain.values import ZERO, parse_calendar_date, to_amount
from cashbook_kernel.exceptions import ValidationError


class PaymentCategory(str, Enum):
    """
    Non-cash payment categories a sale can be settled with.

    The legacy input shape selects exactly one category per record; here
    each category is an independent named amount so a day can sum several.
    """

    CREDIT = "credit"
    CREDIT_REPAYMENTS = "credit_repayments"
    TOP_UPS = "top_ups"
    CARD_PAYMENT = "card_payment"
    TRANSFERS = "transfers"


@dataclass(frozen=True)
class PaymentBreakdown:
    """
    Per-category payment amounts carried by one movement.

    Contract:
        Frozen dataclass; every category defaults to zero and is validated
        as a non-negative Decimal.
    Guarantees:
        - Attribute names match ``PaymentCategory`` values.
    """

    credit: Decimal = ZERO
    credit_repayments: Decimal = ZERO
    top_ups: Decimal = ZERO
    card_payment: Decimal = ZERO
    transfers: Decimal = ZERO

    def __post_init__(self) -> None:
        for category in PaymentCategory:
            raw = getattr(self, category.value)
            object.__setattr__(self, category.value, to_amount(raw, category.value))

    @classmethod
    def single(cls, category: PaymentCategory | str, amount: Any) -> PaymentBreakdown:
        """Build a breakdown with one category set (the legacy one-of shape)."""
        try:
            category = PaymentCategory(category)
        except ValueError as exc:
            raise ValidationError("payment_category", category, "unknown payment category") from exc
        return cls(**{category.value: amount})

    def amount_for(self, category: PaymentCategory) -> Decimal:
        return getattr(self, category.value)

    def as_dict(self) -> dict[str, Decimal]:
        return {category.value: self.amount_for(category) for category in PaymentCategory}


# Numeric fields of a MovementRecord, in canonical order.
AMOUNT_FIELDS: tuple[str, ...] = (
    "gross_sales",
    PaymentCategory.CREDIT.value,
    PaymentCategory.CREDIT_REPAYMENTS.value,
    PaymentCategory.TOP_UPS.value,
    PaymentCategory.CARD_PAYMENT.value,
    PaymentCategory.TRANSFERS.value,
    "expenses",
    "manual_deposit",
)


@dataclass(frozen=True)
class MovementRecord:
    """
    One financial event for one branch on one date.

    Contract:
        Frozen, self-validating value object.  Construction either yields a
        valid record or raises a ValidationError naming the bad field.
    Guarantees:
        - ``date`` is a ``datetime.date`` (datetimes are truncated).
        - All amounts are Decimal >= 0.
    Non-goals:
        - Does not know which month is being reconciled; scope checks belong
          to the reconciler.
        - ``record_id`` and ``notes`` are informational and never summed.
    """

    date: date
    branch_id: str | int
    gross_sales: Decimal
    payment: PaymentBreakdown = field(default_factory=PaymentBreakdown)
    expenses: Decimal = ZERO
    manual_deposit: Decimal = ZERO
    record_id: str | int | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", parse_calendar_date(self.date, "date"))

        if self.branch_id is None or isinstance(self.branch_id, bool) or (
            isinstance(self.branch_id, str) and not self.branch_id.strip()
        ):
            raise ValidationError("branch_id", self.branch_id, "branch is required")

        object.__setattr__(self, "gross_sales", to_amount(self.gross_sales, "gross_sales"))
        object.__setattr__(self, "expenses", to_amount(self.expenses, "expenses"))
        object.__setattr__(
            self, "manual_deposit", to_amount(self.manual_deposit, "manual_deposit")
        )
        if not isinstance(self.payment, PaymentBreakdown):
            raise ValidationError("payment", self.payment, "expected a PaymentBreakdown")

    @property
    def credit(self) -> Decimal:
        return self.payment.credit

    @property
    def credit_repayments(self) -> Decimal:
        return self.payment.credit_repayments

    @property
    def top_ups(self) -> Decimal:
        return self.payment.top_ups

    @property
    def card_payment(self) -> Decimal:
        return self.payment.card_payment

    @property
    def transfers(self) -> Decimal:
        return self.payment.transfers

    def amounts(self) -> dict[str, Decimal]:
        """All numeric fields keyed by ``AMOUNT_FIELDS`` name."""
        return {name: getattr(self, name) for name in AMOUNT_FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MovementRecord:
        """
        Build a record from a mapping with canonical snake_case keys.

        Every numeric field must be present; a missing key raises a
        ValidationError for that field.  Payment categories may be given
        flat or nested under ``payment``.
        """
        for required in ("date", "branch_id"):
            if required not in data:
                raise ValidationError(required, None, "field is required")

        payment_source: Mapping[str, Any] = data.get("payment") or data
        payment_kwargs: dict[str, Any] = {}
        for category in PaymentCategory:
            if category.value not in payment_source:
                raise ValidationError(category.value, None, "field is required")
            payment_kwargs[category.value] = payment_source[category.value]

        amounts: dict[str, Any] = {}
        for name in ("gross_sales", "expenses", "manual_deposit"):
            if name not in data:
                raise ValidationError(name, None, "field is required")
            amounts[name] = data[name]

        return cls(
            date=data["date"],
            branch_id=data["branch_id"],
            payment=PaymentBreakdown(**payment_kwargs),
            record_id=data.get("record_id"),
            notes=data.get("notes"),
            **amounts,
        )
