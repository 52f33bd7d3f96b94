"""Per-project npm package settings."""

from fastapi import APIRouter

from specforge.api.access import get_owned_project
from specforge.dependencies import CurrentUser, DBSession
from specforge.errors.exceptions import NotFoundError
from specforge.models.npm_config import NpmConfig
from specforge.repositories.npm_config_repo import NpmConfigRepository

router = APIRouter(tags=["NPM Config"])


@router.get("/projects/{project_id}/npm-config")
async def get_npm_config(project_id: str, db: DBSession, user: CurrentUser) -> dict:
    await get_owned_project(project_id, user, db)
    row = await NpmConfigRepository(db).get_by_project(project_id)
    if not row:
        raise NotFoundError("NpmConfig", project_id)
    return {
        "project_id": row.project_id,
        "package_name": row.package_name,
        "version": row.version,
        "description": row.description,
        "author": row.author,
    }


@router.put("/projects/{project_id}/npm-config")
async def upsert_npm_config(project_id: str, config: NpmConfig, db: DBSession, user: CurrentUser) -> dict:
    await get_owned_project(project_id, user, db)
    row = await NpmConfigRepository(db).upsert(project_id, **config.model_dump())
    await db.commit()
    return {"project_id": row.project_id, **config.model_dump()}
