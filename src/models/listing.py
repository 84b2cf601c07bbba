"""Lot-level auction listings.

Catalog, SellingPrice and OutLots mirror a Stock's identity (unique ``lot_no``,
closed-set grade/broker, owning admin) but never take part in the weight ledger.
"""

from datetime import date

from sqlalchemy import CheckConstraint, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class LotListingMixin:
    lot_no: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    broker: Mapped[str] = mapped_column(String(10), nullable=False)
    selling_mark: Mapped[str | None] = mapped_column(String(100), nullable=True)
    grade: Mapped[str] = mapped_column(String(10), nullable=False)
    invoice_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sale_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bags: Mapped[int] = mapped_column(Integer, nullable=False)
    net_weight: Mapped[float] = mapped_column(Float, nullable=False)
    total_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    producer_country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    manufacture_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    @declared_attr
    def admin_cognito_id(cls) -> Mapped[str]:
        return mapped_column(ForeignKey("admins.admin_cognito_id"), nullable=False)


class Catalog(LotListingMixin, UUIDMixin, TimestampMixin, Base):
    __tablename__ = "catalogs"
    __table_args__ = (
        CheckConstraint("bags > 0", name="ck_catalogs_bags_positive"),
        CheckConstraint("net_weight > 0", name="ck_catalogs_net_weight_positive"),
    )

    category: Mapped[str] = mapped_column(String(5), nullable=False)
    asking_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    reprint: Mapped[str | None] = mapped_column(String(5), nullable=True)

    def __repr__(self) -> str:
        return f"<Catalog id={self.id!r} lot_no={self.lot_no!r}>"


class SellingPrice(LotListingMixin, UUIDMixin, TimestampMixin, Base):
    __tablename__ = "selling_prices"

    category: Mapped[str] = mapped_column(String(5), nullable=False)
    asking_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    purchase_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    reprint: Mapped[str | None] = mapped_column(String(5), nullable=True)

    def __repr__(self) -> str:
        return f"<SellingPrice id={self.id!r} lot_no={self.lot_no!r}>"


class OutLots(LotListingMixin, UUIDMixin, TimestampMixin, Base):
    __tablename__ = "out_lots"

    auction: Mapped[str | None] = mapped_column(String(100), nullable=True)
    baseline_price: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<OutLots id={self.id!r} lot_no={self.lot_no!r}>"
