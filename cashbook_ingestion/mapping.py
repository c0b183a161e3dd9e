"""
Legacy movement payload mapping.

Responsibility:
    Turn one raw record from the branch movement API (camelCase Spanish
    field names, optional ``tipoPago`` / ``importeTipoPago`` selection) into
    a canonical ``MovementRecord``.

Architecture position:
    Ingestion -- sits between source adapters (raw dicts) and the engines.
    No DB, no file I/O.

Rules:
    - Field names are translated through ``IngestionSettings.field_aliases``;
      names that are already canonical pass through unchanged.
    - ``date``, ``branch_id`` and ``gross_sales`` are required.
    - Payment categories, ``expenses`` and ``manual_deposit`` that are
      absent, null or blank count as zero (the API stores ``value || 0``).
      A present value that is not a valid amount still raises.
    - ``tipoPago`` names one payment category; its amount comes from
      ``importeTipoPago``.  If the named category also carries its own
      non-zero field with a different amount the record is ambiguous and
      rejected.
    - Timestamps such as ``2024-03-01T00:00:00.000Z`` are truncated to the
      calendar date written before the ``T``.

Failure modes:
    - ValidationError (from the record model) naming the offending field.
    - IngestionError for an unknown payment type or a conflicting amount.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from cashbook_config.schema import IngestionSettings
from cashbook_engines.movement import MovementRecord, PaymentBreakdown, PaymentCategory
from cashbook_kernel.domain.values import ZERO, to_amount
from cashbook_kernel.exceptions import IngestionError, ValidationError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("ingestion.mapping")

_REQUIRED_FIELDS = ("date", "branch_id", "gross_sales")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _canonicalize_keys(raw: Mapping[str, Any], settings: IngestionSettings) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key, value in raw.items():
        data[settings.canonical_field(key)] = value
    return data


def _optional_amount(data: Mapping[str, Any], name: str) -> Decimal:
    value = data.get(name)
    if _is_blank(value):
        return ZERO
    return to_amount(value, name)


def _resolve_payment_type(value: Any, settings: IngestionSettings, row: int | None) -> PaymentCategory:
    text = str(value).strip()
    category = settings.payment_category_for(text) or text
    try:
        return PaymentCategory(category)
    except ValueError as exc:
        raise IngestionError(f"unknown payment type {text!r}", row=row) from exc


def _payment_breakdown(
    raw: Mapping[str, Any],
    data: Mapping[str, Any],
    settings: IngestionSettings,
    row: int | None,
) -> PaymentBreakdown:
    amounts = {
        category.value: _optional_amount(data, category.value)
        for category in PaymentCategory
    }

    payment_type = raw.get(settings.payment_type_field)
    if _is_blank(payment_type):
        return PaymentBreakdown(**amounts)

    category = _resolve_payment_type(payment_type, settings, row)
    selected = to_amount(raw.get(settings.payment_amount_field), settings.payment_amount_field)
    explicit = amounts[category.value]
    if explicit != ZERO and explicit != selected:
        raise IngestionError(
            f"{settings.payment_type_field}={payment_type!r} amount {selected} "
            f"conflicts with {category.value}={explicit}",
            row=row,
        )
    amounts[category.value] = selected
    return PaymentBreakdown(**amounts)


def map_api_record(
    raw: Mapping[str, Any],
    settings: IngestionSettings,
    row: int | None = None,
) -> MovementRecord:
    """
    Map one raw API/file record to a ``MovementRecord``.

    Args:
        raw: Record as returned by the movement API or read by an adapter.
        settings: Field and payment-type aliases.
        row: Source position, used only in error messages.

    Raises:
        ValidationError: If a required field is missing or an amount or
            date is invalid.
        IngestionError: If the payment type is unknown or ambiguous.
    """
    data = _canonicalize_keys(raw, settings)

    for name in _REQUIRED_FIELDS:
        if _is_blank(data.get(name)):
            raise ValidationError(name, data.get(name), "field is required")

    return MovementRecord(
        date=data["date"],
        branch_id=data["branch_id"],
        gross_sales=data["gross_sales"],
        payment=_payment_breakdown(raw, data, settings, row),
        expenses=_optional_amount(data, "expenses"),
        manual_deposit=_optional_amount(data, "manual_deposit"),
        record_id=data.get("record_id"),
        notes=data.get("notes"),
    )


def records_from_rows(
    rows: Iterable[Mapping[str, Any]],
    settings: IngestionSettings,
) -> list[MovementRecord]:
    """
    Map every row, failing on the first bad one.

    A partial month is never returned: one rejected row aborts the batch.
    """
    records: list[MovementRecord] = []
    for position, raw in enumerate(rows, start=1):
        try:
            records.append(map_api_record(raw, settings, row=position))
        except ValidationError as exc:
            logger.warning("row_rejected", extra={
                "row": position,
                "field": exc.field,
                "reason": exc.reason,
            })
            raise
    logger.debug("rows_mapped", extra={"record_count": len(records)})
    return records
