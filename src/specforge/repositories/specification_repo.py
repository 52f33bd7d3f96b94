"""Specification repository (the per-project current-spec pointer)."""

from specforge.db.models.specification import SpecificationRow
from specforge.repositories.base import BaseRepository


class SpecificationRepository(BaseRepository[SpecificationRow]):
    model_class = SpecificationRow
    pk_field = "spec_id"

    async def get_current(self, project_id: str) -> SpecificationRow | None:
        rows = await self.newest_first("project_id", project_id, limit=1)
        return rows[0] if rows else None
