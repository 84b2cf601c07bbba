from typing import Any

from sqlalchemy import Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, JSONDocument, TimestampMixin, UUIDMixin


class AdminNotification(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "admin_notifications"

    admin_cognito_id: Mapped[str] = mapped_column(
        ForeignKey("admins.admin_cognito_id"),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<AdminNotification id={self.id!r} admin_cognito_id={self.admin_cognito_id!r}>"
