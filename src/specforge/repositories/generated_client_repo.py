"""GeneratedClient repository."""

from specforge.db.models.generated_client import GeneratedClientRow
from specforge.repositories.base import BaseRepository


class GeneratedClientRepository(BaseRepository[GeneratedClientRow]):
    model_class = GeneratedClientRow
    pk_field = "client_id"

    async def list_latest_by_project(self, project_id: str, limit: int = 2) -> list[GeneratedClientRow]:
        """Most recent clients for a project, newest first."""
        return await self.newest_first("project_id", project_id, limit=limit)

    async def get_latest_by_project(self, project_id: str) -> GeneratedClientRow | None:
        rows = await self.newest_first("project_id", project_id, limit=1)
        return rows[0] if rows else None

    async def get_latest_by_version(self, version_id: str) -> GeneratedClientRow | None:
        rows = await self.newest_first("version_id", version_id, limit=1)
        return rows[0] if rows else None
