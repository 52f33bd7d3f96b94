"""Project repository."""

from specforge.db.models.project import ProjectRow
from specforge.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[ProjectRow]):
    model_class = ProjectRow
    pk_field = "project_id"

    async def list_by_owner(self, owner_id: str) -> list[ProjectRow]:
        return await self.newest_first("owner_id", owner_id)
