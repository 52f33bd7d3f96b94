"""GeneratedClient table (append-only AI output)."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from specforge.db.base import Base, TimestampMixin


class GeneratedClientRow(Base, TimestampMixin):
    __tablename__ = "generated_clients"

    client_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(128), ForeignKey("projects.project_id"), nullable=False, index=True)
    version_id: Mapped[str] = mapped_column(String(128), ForeignKey("spec_versions.version_id"), nullable=False, index=True)
    client_code: Mapped[str] = mapped_column(Text, nullable=False)
