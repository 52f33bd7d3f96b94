"""SpecVersion repository."""

from specforge.db.models.spec_version import SpecVersionRow
from specforge.repositories.base import BaseRepository


class SpecVersionRepository(BaseRepository[SpecVersionRow]):
    model_class = SpecVersionRow
    pk_field = "version_id"

    async def list_by_project(self, project_id: str) -> list[SpecVersionRow]:
        """Version history, newest first."""
        return await self.newest_first("project_id", project_id)
