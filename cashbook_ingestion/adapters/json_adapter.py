"""
JSON source adapter.

Handles a JSON array (file is [{...}, {...}, ...]), an API response that
nests the array under a key (e.g. {"movimientos": [...]}), and JSON Lines
(one object per line).  Options: ``json_path`` for the nested array
(dot-separated), ``format`` "array" | "jsonl", ``encoding``.

Field names are kept as written (the movement API uses camelCase), only
surrounding whitespace is stripped.  A row that is not an object is an
IngestionError: skipping it would silently drop money from a month.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from cashbook_ingestion.adapters.base import SourceProbe
from cashbook_kernel.exceptions import IngestionError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("ingestion.json_adapter")

_SAMPLE_SIZE = 5


def _get_nested(data: Any, path: str) -> Any:
    """Follow dot-separated path into dict/list. Returns None if key missing."""
    if not path.strip():
        return data
    for key in path.split("."):
        key = key.strip()
        if not key:
            continue
        if isinstance(data, list):
            try:
                data = data[int(key)]
            except (ValueError, IndexError):
                return None
        elif isinstance(data, dict) and key in data:
            data = data[key]
        else:
            return None
    return data


def _all_keys(rows: list[dict[str, Any]]) -> tuple[str, ...]:
    """Union of keys from the sample rows for the column list."""
    seen: set[str] = set()
    for row in rows[:_SAMPLE_SIZE]:
        seen.update(row.keys())
    return tuple(sorted(seen))


def _normalize_row(item: Any, position: int) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise IngestionError(
            f"expected a JSON object, got {type(item).__name__}", row=position,
        )
    return {str(k).strip(): v for k, v in item.items()}


class JsonSourceAdapter:
    """Read JSON array or JSON Lines files as one dict per movement."""

    def _load_array(self, source_path: Path, options: dict[str, Any]) -> list[Any]:
        encoding = options.get("encoding", "utf-8")
        json_path = options.get("json_path")
        with source_path.open("r", encoding=encoding) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise IngestionError(f"invalid JSON: {exc.msg}") from exc
        root = _get_nested(data, json_path) if json_path else data
        if not isinstance(root, list):
            where = f" at '{json_path}'" if json_path else ""
            raise IngestionError(f"no JSON array found{where} in {source_path.name}")
        return root

    def _iter_lines(self, source_path: Path, options: dict[str, Any]) -> Iterator[Any]:
        encoding = options.get("encoding", "utf-8")
        with source_path.open("r", encoding=encoding) as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as exc:
                    raise IngestionError(f"invalid JSON: {exc.msg}", row=line_number) from exc

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        if options.get("format", "array") == "jsonl":
            items: Iterator[Any] | list[Any] = self._iter_lines(source_path, options)
        else:
            items = self._load_array(source_path, options)

        count = 0
        for position, item in enumerate(items, start=1):
            yield _normalize_row(item, position)
            count += 1

        logger.debug("json_source_read", extra={
            "source": source_path.name,
            "row_count": count,
        })

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = options.get("encoding", "utf-8")

        if options.get("format", "array") == "jsonl":
            sample: list[dict[str, Any]] = []
            count = 0
            for item in self._iter_lines(source_path, options):
                count += 1
                if len(sample) < _SAMPLE_SIZE and isinstance(item, dict):
                    sample.append(item)
            return SourceProbe(
                row_count=count,
                columns=_all_keys(sample),
                sample_rows=tuple(sample),
                encoding=encoding,
            )

        root = self._load_array(source_path, options)
        sample = [r for r in root[:_SAMPLE_SIZE] if isinstance(r, dict)]
        return SourceProbe(
            row_count=len(root),
            columns=_all_keys(sample),
            sample_rows=tuple(sample),
            encoding=encoding,
        )
