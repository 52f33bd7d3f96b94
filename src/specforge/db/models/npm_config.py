"""NpmConfig table (one row per project)."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from specforge.db.base import Base, TimestampMixin


class NpmConfigRow(Base, TimestampMixin):
    __tablename__ = "npm_configs"

    project_id: Mapped[str] = mapped_column(String(128), ForeignKey("projects.project_id"), primary_key=True)
    package_name: Mapped[str] = mapped_column(String(214), nullable=False)
    version: Mapped[str] = mapped_column(String(50), nullable=False, default="1.0.0")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    author: Mapped[str | None] = mapped_column(String(200), nullable=True)
