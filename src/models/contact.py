from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class Contact(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "contacts"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str | None] = mapped_column(String(200), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    privacy_consent: Mapped[bool] = mapped_column(Boolean, nullable=False)
    user_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Contact id={self.id!r} email={self.email!r}>"
