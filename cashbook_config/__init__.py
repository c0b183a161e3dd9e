"""
cashbook_config -- single public entrypoint for cashbook configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned
    ``CashbookConfig`` through their constructor and never read YAML
    themselves.

Architecture position:
    Configuration -- sits above ``cashbook_kernel`` and below
    ``cashbook_services`` / ``cashbook_ingestion``.  Engines never import
    this package; display precision reaches them as plain arguments.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ConfigurationError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``CASHBOOK_CONFIG_TRACE`` log entry containing the config_id, version
    and checksum, tying each exported report to the configuration that
    shaped it.
"""

from __future__ import annotations

from pathlib import Path

from cashbook_config.loader import compute_checksum, load_yaml_file, parse_config
from cashbook_config.schema import (
    CashbookConfig,
    ExportSettings,
    IngestionSettings,
    ReconciliationSettings,
)
from cashbook_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration file shipped with the package
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> CashbookConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML configuration file.
            Defaults to cashbook_config/sets/default.yaml.

    Returns:
        CashbookConfig -- frozen, validated configuration.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))

    _logger.info(
        "CASHBOOK_CONFIG_TRACE",
        extra={
            "trace_type": "CASHBOOK_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "config_path": str(path),
        },
    )
    return config


__all__ = [
    "CashbookConfig",
    "DEFAULT_CONFIG_PATH",
    "ExportSettings",
    "IngestionSettings",
    "ReconciliationSettings",
    "compute_checksum",
    "get_active_config",
]
