from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class Report(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "reports"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_type: Mapped[str] = mapped_column(String(10), nullable=False)
    admin_cognito_id: Mapped[str] = mapped_column(
        ForeignKey("admins.admin_cognito_id"),
        nullable=False,
    )
    user_cognito_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.user_cognito_id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Report id={self.id!r} title={self.title!r} file_type={self.file_type!r}>"
