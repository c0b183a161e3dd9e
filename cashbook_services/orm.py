"""
Movement store ORM Models (``cashbook_services.orm``).

Responsibility
--------------
SQLAlchemy persistence model for raw daily movements, one row per
recorded movement.  Maps to and from the frozen ``MovementRecord`` value
object.  Balances are never stored: they are derived on every query.

Architecture position
---------------------
**Services layer** -- persistence.  Imports from ``cashbook_kernel.db.base``
and ``cashbook_engines.movement``.  MUST NOT be imported by the engines.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from cashbook_kernel.db.base import TrackedBase


# ---------------------------------------------------------------------------
# DailyMovementModel
# ---------------------------------------------------------------------------

class DailyMovementModel(TrackedBase):
    """
    ORM model for ``MovementRecord`` -- one movement recorded at a branch.

    Table: ``cashbook_daily_movements``
    """

    __tablename__ = "cashbook_daily_movements"

    branch_id: Mapped[str] = mapped_column(String(64))
    movement_date: Mapped[date]
    gross_sales: Mapped[Decimal]
    credit: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    credit_repayments: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    top_ups: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    card_payment: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    transfers: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    expenses: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    manual_deposit: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_cashbook_daily_movements_branch_date", "branch_id", "movement_date"),
    )

    def to_dto(self):
        from cashbook_engines.movement import MovementRecord, PaymentBreakdown
        return MovementRecord(
            date=self.movement_date,
            branch_id=self.branch_id,
            gross_sales=self.gross_sales,
            payment=PaymentBreakdown(
                credit=self.credit,
                credit_repayments=self.credit_repayments,
                top_ups=self.top_ups,
                card_payment=self.card_payment,
                transfers=self.transfers,
            ),
            expenses=self.expenses,
            manual_deposit=self.manual_deposit,
            record_id=str(self.id),
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto) -> "DailyMovementModel":
        return cls(
            branch_id=str(dto.branch_id),
            movement_date=dto.date,
            gross_sales=dto.gross_sales,
            credit=dto.credit,
            credit_repayments=dto.credit_repayments,
            top_ups=dto.top_ups,
            card_payment=dto.card_payment,
            transfers=dto.transfers,
            expenses=dto.expenses,
            manual_deposit=dto.manual_deposit,
            notes=dto.notes,
        )

    def __repr__(self) -> str:
        return (
            f"<DailyMovementModel(id={self.id!r}, branch_id={self.branch_id!r}, "
            f"movement_date={self.movement_date!r})>"
        )
