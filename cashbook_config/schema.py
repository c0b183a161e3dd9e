"""
CashbookConfig schema.

Defines the human-authored, reviewable configuration for reconciliation,
export and ingestion.  YAML files are parsed into these types by the
loader; ``get_active_config()`` is the only runtime entry point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP

# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReconciliationSettings:
    """Display rounding applied by the projector (never by the fold)."""

    display_precision: int = 2
    rounding: str = ROUND_HALF_UP


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportSettings:
    """Spreadsheet export layout."""

    sheet_title: str = "Movimientos"
    # (column name, header label) pairs in export order.
    column_labels: tuple[tuple[str, str], ...] = ()
    number_format: str = "#,##0.00"
    date_format: str = "yyyy-mm-dd"
    totals_label: str = "Total"

    def label_for(self, column: str) -> str:
        for name, label in self.column_labels:
            if name == column:
                return label
        return column


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IngestionSettings:
    """How legacy API payloads map onto canonical movement fields."""

    # (source field, canonical field) pairs.
    field_aliases: tuple[tuple[str, str], ...] = ()
    payment_type_field: str = "tipoPago"
    payment_amount_field: str = "importeTipoPago"
    # (legacy payment type, PaymentCategory value) pairs.
    payment_type_aliases: tuple[tuple[str, str], ...] = ()
    json_path: str | None = None

    def canonical_field(self, source: str) -> str:
        for alias, canonical in self.field_aliases:
            if alias == source:
                return canonical
        return source

    def payment_category_for(self, payment_type: str) -> str | None:
        for alias, category in self.payment_type_aliases:
            if alias == payment_type:
                return category
        return None


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CashbookConfig:
    """The complete configuration, frozen after load."""

    config_id: str
    version: int
    reconciliation: ReconciliationSettings = field(default_factory=ReconciliationSettings)
    export: ExportSettings = field(default_factory=ExportSettings)
    ingestion: IngestionSettings = field(default_factory=IngestionSettings)
    checksum: str = ""
