import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from src.models.stock import Stock


class Shipment(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "shipments"

    shipmark: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending")
    vessel: Mapped[str] = mapped_column(String(20), nullable=False)
    packaging_instructions: Mapped[str] = mapped_column(String(30), nullable=False)
    consignee: Mapped[str | None] = mapped_column(String(200), nullable=True)
    additional_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    shipment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_cognito_id: Mapped[str] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=False,
    )
    admin_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("admins.admin_cognito_id"),
        nullable=True,
    )

    items: Mapped[list["ShipmentItem"]] = relationship(
        "ShipmentItem",
        back_populates="shipment",
    )

    def __repr__(self) -> str:
        return f"<Shipment id={self.id!r} shipmark={self.shipmark!r} status={self.status!r}>"


class ShipmentItem(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "shipment_items"
    __table_args__ = (
        UniqueConstraint("shipment_id", "stock_id", name="uq_shipment_items_shipment_stock"),
        CheckConstraint("assigned_weight > 0", name="ck_shipment_items_weight_positive"),
    )

    shipment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("shipments.id"),
        nullable=False,
    )
    stock_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stocks.id"),
        nullable=False,
    )
    assigned_weight: Mapped[float] = mapped_column(Float, nullable=False)

    shipment: Mapped["Shipment"] = relationship("Shipment", back_populates="items")
    stock: Mapped["Stock"] = relationship("Stock")

    def __repr__(self) -> str:
        return (
            f"<ShipmentItem id={self.id!r} shipment_id={self.shipment_id!r} "
            f"assigned_weight={self.assigned_weight!r}>"
        )
