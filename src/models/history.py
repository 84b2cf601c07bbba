"""Append-only audit trails for stocks and shipments."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, JSONDocument, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from src.models.stock import Stock


class StockHistory(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "stock_history"
    __table_args__ = (Index("ix_stock_history_stock_id_timestamp", "stock_id", "timestamp"),)

    stock_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stocks.id"),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    # Signed delta applied to Stock.weight; NULL for imported, informational rows.
    weight_change: Mapped[float | None] = mapped_column(Float, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=True,
    )
    admin_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("admins.admin_cognito_id"),
        nullable=True,
    )
    shipment_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("shipments.id"),
        nullable=True,
    )
    details: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    operation_key: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)

    stock: Mapped["Stock"] = relationship("Stock")

    def __repr__(self) -> str:
        return f"<StockHistory id={self.id!r} stock_id={self.stock_id!r} action={self.action!r}>"


class ShipmentHistory(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "shipment_history"

    shipment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("shipments.id"),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=True,
    )
    admin_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("admins.admin_cognito_id"),
        nullable=True,
    )
    details: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ShipmentHistory id={self.id!r} shipment_id={self.shipment_id!r} "
            f"action={self.action!r}>"
        )
