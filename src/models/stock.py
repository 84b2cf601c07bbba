import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from src.models.admin import Admin


class Stock(UUIDMixin, TimestampMixin, Base):
    """A physical lot in inventory.

    ``weight`` is the on-hand balance.  It is only ever changed through
    :func:`src.services.ledger.adjust_stock`, which also writes the matching
    ``StockHistory`` row.
    """

    __tablename__ = "stocks"
    __table_args__ = (
        CheckConstraint("weight >= 0", name="ck_stocks_weight_non_negative"),
        CheckConstraint("bags > 0", name="ck_stocks_bags_positive"),
    )

    lot_no: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    sale_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    broker: Mapped[str] = mapped_column(String(10), nullable=False)
    mark: Mapped[str | None] = mapped_column(String(100), nullable=True)
    grade: Mapped[str] = mapped_column(String(10), nullable=False)
    invoice_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bags: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    purchase_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    batch_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    low_stock_threshold: Mapped[float | None] = mapped_column(Float, nullable=True)
    admin_cognito_id: Mapped[str] = mapped_column(
        ForeignKey("admins.admin_cognito_id"),
        nullable=False,
    )

    admin: Mapped["Admin"] = relationship("Admin")

    def __repr__(self) -> str:
        return f"<Stock id={self.id!r} lot_no={self.lot_no!r} weight={self.weight!r}>"


class StockAssignment(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "stock_assignments"
    __table_args__ = (
        UniqueConstraint("stock_id", "user_cognito_id", name="uq_stock_assignments_stock_user"),
        CheckConstraint("assigned_weight > 0", name="ck_stock_assignments_weight_positive"),
    )

    stock_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stocks.id"),
        nullable=False,
    )
    user_cognito_id: Mapped[str] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=False,
    )
    assigned_weight: Mapped[float] = mapped_column(Float, nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    stock: Mapped["Stock"] = relationship("Stock")

    def __repr__(self) -> str:
        return (
            f"<StockAssignment id={self.id!r} stock_id={self.stock_id!r} "
            f"user_cognito_id={self.user_cognito_id!r}>"
        )
