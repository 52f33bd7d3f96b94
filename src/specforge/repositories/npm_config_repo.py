"""NpmConfig repository."""

from specforge.db.models.npm_config import NpmConfigRow
from specforge.repositories.base import BaseRepository


class NpmConfigRepository(BaseRepository[NpmConfigRow]):
    model_class = NpmConfigRow
    pk_field = "project_id"

    async def get_by_project(self, project_id: str) -> NpmConfigRow | None:
        return await self.get(project_id)

    async def upsert(self, project_id: str, **fields) -> NpmConfigRow:
        existing = await self.get(project_id)
        if existing:
            return await self.update(existing, **fields)
        return await self.create(project_id=project_id, **fields)
