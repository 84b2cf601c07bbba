import uuid

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class Favorite(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_cognito_id", "stock_id", name="uq_favorites_user_stock"),
    )

    user_cognito_id: Mapped[str] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=False,
    )
    stock_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("stocks.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Favorite id={self.id!r} user_cognito_id={self.user_cognito_id!r}>"
