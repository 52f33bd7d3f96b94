"""Project CRUD API routes."""

from fastapi import APIRouter

from specforge.api.access import get_owned_project
from specforge.db.models.project import ProjectRow
from specforge.dependencies import CurrentUser, DBSession
from specforge.models.npm_config import NpmConfig
from specforge.models.project import Project, ProjectCreate
from specforge.repositories.npm_config_repo import NpmConfigRepository
from specforge.repositories.project_repo import ProjectRepository
from specforge.services.id_generator import PROJECT_PREFIX, generate_id

router = APIRouter(tags=["Projects"])


def _to_model(row: ProjectRow, npm_config: NpmConfig | None = None) -> dict:
    return Project(
        project_id=row.project_id,
        name=row.name,
        owner_id=row.owner_id,
        created_at=row.created_at,
        npm_config=npm_config,
    ).model_dump(mode="json", exclude_none=True)


@router.post("/projects", status_code=201)
async def create_project(project: ProjectCreate, db: DBSession, user: CurrentUser) -> dict:
    repo = ProjectRepository(db)
    row = await repo.create(
        project_id=generate_id(PROJECT_PREFIX),
        name=project.name.strip(),
        owner_id=user["sub"],
    )
    await db.commit()
    return _to_model(row)


@router.get("/projects")
async def list_projects(db: DBSession, user: CurrentUser) -> list[dict]:
    """List the caller's projects, newest first."""
    rows = await ProjectRepository(db).list_by_owner(user["sub"])
    return [_to_model(row) for row in rows]


@router.get("/projects/{project_id}")
async def get_project(project_id: str, db: DBSession, user: CurrentUser) -> dict:
    row = await get_owned_project(project_id, user, db)
    config = await NpmConfigRepository(db).get_by_project(project_id)
    npm_config = None
    if config:
        npm_config = NpmConfig(
            package_name=config.package_name,
            version=config.version,
            description=config.description,
            author=config.author,
        )
    return _to_model(row, npm_config)
