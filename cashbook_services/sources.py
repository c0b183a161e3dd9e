"""
Module: cashbook_services.sources
Responsibility: Implementations of the movement data-access collaborator,
    ``fetch_movements(branch_id, year_month) -> list[MovementRecord]``.
Architecture position: Services.  Feeds the reconciliation service; the
    engines never see where records came from.

Sources provided:
    - InMemoryMovementSource: records held in a list (tests, callers that
      already fetched).
    - JsonFileMovementSource: a JSON / JSON Lines export of the movement
      API, mapped through the legacy payload mapping.
    - MovementSelector: read-only SQLAlchemy selector over
      ``cashbook_daily_movements``.

Invariants enforced:
    - Every source returns only the requested branch and month; selection
      happens here, at the data-access boundary.
    - Sources return frozen ``MovementRecord`` values, never ORM instances.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.orm import Session

from cashbook_config.schema import IngestionSettings
from cashbook_engines.movement import MovementRecord
from cashbook_ingestion.adapters.json_adapter import JsonSourceAdapter
from cashbook_ingestion.mapping import records_from_rows
from cashbook_kernel.domain.values import YearMonth
from cashbook_kernel.logging_config import get_logger
from cashbook_kernel.selectors.base import BaseSelector
from cashbook_services.orm import DailyMovementModel

logger = get_logger("services.sources")


@runtime_checkable
class MovementSource(Protocol):
    """Anything that can fetch one branch's movements for one month."""

    def fetch_movements(
        self,
        branch_id: str | int,
        year_month: YearMonth | str,
    ) -> list[MovementRecord]:
        ...


def _select(
    records: Iterable[MovementRecord],
    branch_id: str | int,
    year_month: YearMonth,
) -> list[MovementRecord]:
    expected = str(branch_id)
    return [
        record for record in records
        if str(record.branch_id) == expected and year_month.contains(record.date)
    ]


class InMemoryMovementSource:
    """Serve movements from an in-memory collection."""

    def __init__(self, records: Iterable[MovementRecord] = ()):
        self._records: tuple[MovementRecord, ...] = tuple(records)

    def fetch_movements(
        self,
        branch_id: str | int,
        year_month: YearMonth | str,
    ) -> list[MovementRecord]:
        return _select(self._records, branch_id, YearMonth.coerce(year_month))


class JsonFileMovementSource:
    """
    Serve movements from a JSON export of the movement API.

    The file is re-read on every fetch so edits to the export are picked up.
    """

    def __init__(
        self,
        path: Path | str,
        settings: IngestionSettings,
        options: dict[str, Any] | None = None,
    ):
        self.path = Path(path)
        self.settings = settings
        self.options = dict(options or {})
        if "json_path" not in self.options and settings.json_path:
            self.options["json_path"] = settings.json_path
        self._adapter = JsonSourceAdapter()

    def fetch_movements(
        self,
        branch_id: str | int,
        year_month: YearMonth | str,
    ) -> list[MovementRecord]:
        target = YearMonth.coerce(year_month)
        rows = self._adapter.read(self.path, self.options)
        records = records_from_rows(rows, self.settings)
        selected = _select(records, branch_id, target)
        logger.debug("json_movements_fetched", extra={
            "source": self.path.name,
            "row_count": len(records),
            "selected_count": len(selected),
        })
        return selected


class MovementSelector(BaseSelector[DailyMovementModel]):
    """
    Read-only selector over stored daily movements.

    Contract:
        Accepts a Session from the caller and never writes through it.
    Guarantees:
        - Results are ordered by movement date, then insertion time.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def fetch_movements(
        self,
        branch_id: str | int,
        year_month: YearMonth | str,
    ) -> list[MovementRecord]:
        target = YearMonth.coerce(year_month)
        query = (
            select(DailyMovementModel)
            .where(DailyMovementModel.branch_id == str(branch_id))
            .where(DailyMovementModel.movement_date >= target.first_day)
            .where(DailyMovementModel.movement_date <= target.last_day)
            .order_by(DailyMovementModel.movement_date, DailyMovementModel.created_at)
        )
        rows = self.session.execute(query).scalars().all()
        return [row.to_dto() for row in rows]

    def count(self, branch_id: str | int, year_month: YearMonth | str) -> int:
        """Number of stored movements for a branch and month."""
        return len(self.fetch_movements(branch_id, year_month))
