from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class GradeCategoryMapping(UUIDMixin, TimestampMixin, Base):
    """Which tea category a grade is sold under."""

    __tablename__ = "grade_category_mappings"

    grade: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(5), nullable=False)

    def __repr__(self) -> str:
        return f"<GradeCategoryMapping grade={self.grade!r} category={self.category!r}>"
