"""Ownership checks shared by project-scoped routes."""

from sqlalchemy.ext.asyncio import AsyncSession

from specforge.db.models.project import ProjectRow
from specforge.errors.exceptions import AuthorizationError, NotFoundError
from specforge.repositories.project_repo import ProjectRepository


async def get_owned_project(project_id: str, user: dict, db: AsyncSession) -> ProjectRow:
    """Load a project and make sure the caller owns it."""
    row = await ProjectRepository(db).get(project_id)
    if not row:
        raise NotFoundError("Project", project_id)
    if row.owner_id != user.get("sub"):
        raise AuthorizationError(f"Project '{project_id}' belongs to another user")
    return row
