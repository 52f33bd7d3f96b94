"""SpecVersion table (append-only upload history)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from specforge.db.base import Base, TimestampMixin


class SpecVersionRow(Base, TimestampMixin):
    __tablename__ = "spec_versions"
    __table_args__ = (
        UniqueConstraint("project_id", "version", name="uq_spec_versions_project_version"),
    )

    version_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(128), ForeignKey("projects.project_id"), nullable=False, index=True)
    spec_id: Mapped[str] = mapped_column(String(128), ForeignKey("specifications.spec_id"), nullable=False)
    version: Mapped[str] = mapped_column(String(50), nullable=False)
    file_content: Mapped[str] = mapped_column(Text, nullable=False)
    client_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    publish_error: Mapped[str | None] = mapped_column(Text, nullable=True)
