"""Source adapters for movement ingestion (file I/O only, no DB)."""

from cashbook_ingestion.adapters.base import SourceAdapter, SourceProbe
from cashbook_ingestion.adapters.json_adapter import JsonSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "JsonSourceAdapter",
]
