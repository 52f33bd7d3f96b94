"""Project table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from specforge.db.base import Base, TimestampMixin


class ProjectRow(Base, TimestampMixin):
    __tablename__ = "projects"

    project_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
