"""
Configuration Loader (``cashbook_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into typed
``cashbook_config.schema`` dataclass instances.  Runtime callers go
through ``cashbook_config.get_active_config()`` instead.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Export labels must name known export columns, and only known rounding
  modes are accepted.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid keys  -> ``ConfigurationError`` naming the key.
"""

from __future__ import annotations

import decimal
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from cashbook_config.schema import (
    CashbookConfig,
    ExportSettings,
    IngestionSettings,
    ReconciliationSettings,
)
from cashbook_kernel.exceptions import ConfigurationError

_ROUNDING_MODES = frozenset({
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_DOWN,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
    decimal.ROUND_05UP,
})

_PAYMENT_CATEGORIES = frozenset({
    "credit", "credit_repayments", "top_ups", "card_payment", "transfers",
})

_EXPORT_COLUMNS = (
    "date", "gross_sales", "credit", "credit_repayments", "top_ups",
    "card_payment", "transfers", "expenses", "day_balance",
    "manual_deposit", "accumulated_balance",
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}")
    return data


def _pairs(data: Any, key: str) -> tuple[tuple[str, str], ...]:
    if data is None:
        return ()
    if not isinstance(data, dict):
        raise ConfigurationError(f"'{key}' must be a mapping", key=key)
    return tuple((str(k), str(v)) for k, v in data.items())


def parse_reconciliation(data: dict[str, Any]) -> ReconciliationSettings:
    """Parse ReconciliationSettings from a dict."""
    precision = data.get("display_precision", 2)
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
        raise ConfigurationError(
            f"display_precision must be a non-negative integer, got {precision!r}",
            key="reconciliation.display_precision",
        )
    rounding = data.get("rounding", decimal.ROUND_HALF_UP)
    if rounding not in _ROUNDING_MODES:
        raise ConfigurationError(
            f"Unknown rounding mode {rounding!r}",
            key="reconciliation.rounding",
        )
    return ReconciliationSettings(display_precision=precision, rounding=rounding)


def parse_export(data: dict[str, Any]) -> ExportSettings:
    """
    Parse ExportSettings from a dict.

    ``column_labels`` may omit columns (their name is used as header) but
    may not introduce columns the projector does not produce.
    """
    labels = _pairs(data.get("column_labels"), "export.column_labels")
    unknown = [name for name, _ in labels if name not in _EXPORT_COLUMNS]
    if unknown:
        raise ConfigurationError(
            f"Unknown export columns: {', '.join(unknown)}",
            key="export.column_labels",
        )
    defaults = ExportSettings()
    return ExportSettings(
        sheet_title=str(data.get("sheet_title", defaults.sheet_title)),
        column_labels=labels,
        number_format=str(data.get("number_format", defaults.number_format)),
        date_format=str(data.get("date_format", defaults.date_format)),
        totals_label=str(data.get("totals_label", defaults.totals_label)),
    )


def parse_ingestion(data: dict[str, Any]) -> IngestionSettings:
    """Parse IngestionSettings from a dict."""
    type_aliases = _pairs(data.get("payment_type_aliases"), "ingestion.payment_type_aliases")
    unknown = [category for _, category in type_aliases if category not in _PAYMENT_CATEGORIES]
    if unknown:
        raise ConfigurationError(
            f"Unknown payment categories: {', '.join(unknown)}",
            key="ingestion.payment_type_aliases",
        )
    defaults = IngestionSettings()
    return IngestionSettings(
        field_aliases=_pairs(data.get("field_aliases"), "ingestion.field_aliases"),
        payment_type_field=str(data.get("payment_type_field", defaults.payment_type_field)),
        payment_amount_field=str(
            data.get("payment_amount_field", defaults.payment_amount_field)
        ),
        payment_type_aliases=type_aliases,
        json_path=data.get("json_path"),
    )


def parse_config(data: dict[str, Any]) -> CashbookConfig:
    """
    Parse a complete CashbookConfig from a dict.

    Raises:
        ConfigurationError: if ``config_id`` or ``version`` is missing, or a
            section is malformed.
    """
    for required in ("config_id", "version"):
        if required not in data:
            raise ConfigurationError(f"Missing required key '{required}'", key=required)

    for section in ("reconciliation", "export", "ingestion"):
        if data.get(section) is not None and not isinstance(data[section], dict):
            raise ConfigurationError(f"'{section}' must be a mapping", key=section)

    version = data["version"]
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigurationError(f"version must be an integer, got {version!r}", key="version")

    return CashbookConfig(
        config_id=str(data["config_id"]),
        version=version,
        reconciliation=parse_reconciliation(data.get("reconciliation") or {}),
        export=parse_export(data.get("export") or {}),
        ingestion=parse_ingestion(data.get("ingestion") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
