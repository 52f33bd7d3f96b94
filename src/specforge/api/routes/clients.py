"""Generated client retrieval, comparison and preview routes."""

from fastapi import APIRouter, Query

from specforge.api.access import get_owned_project
from specforge.db.models.generated_client import GeneratedClientRow
from specforge.dependencies import CurrentUser, DBSession, Workflow
from specforge.models.client import ClientPreviewRequest, GeneratedClient
from specforge.models.enums import DiffView, SpecFormat
from specforge.repositories.generated_client_repo import GeneratedClientRepository

router = APIRouter(tags=["Clients"])


def _to_model(row: GeneratedClientRow | None) -> dict | None:
    if row is None:
        return None
    return GeneratedClient(
        client_id=row.client_id,
        project_id=row.project_id,
        version_id=row.version_id,
        client_code=row.client_code,
        created_at=row.created_at,
    ).model_dump(mode="json", exclude_none=True)


@router.get("/projects/{project_id}/clients/latest")
async def get_latest_clients(project_id: str, db: DBSession, user: CurrentUser) -> dict:
    """Return the newest generated client and the one before it."""
    await get_owned_project(project_id, user, db)
    rows = await GeneratedClientRepository(db).list_latest_by_project(project_id, limit=2)
    return {
        "latest": _to_model(rows[0] if rows else None),
        "previous": _to_model(rows[1] if len(rows) > 1 else None),
    }


@router.get("/projects/{project_id}/clients/diff")
async def diff_clients(
    project_id: str,
    db: DBSession,
    user: CurrentUser,
    workflow: Workflow,
    view: DiffView = Query(DiffView.SPLIT),
) -> dict:
    await get_owned_project(project_id, user, db)
    rows = await GeneratedClientRepository(db).list_latest_by_project(project_id, limit=2)
    latest = rows[0] if rows else None
    previous = rows[1] if len(rows) > 1 else None

    diff = workflow.diff(
        previous.client_code if previous else None,
        latest.client_code if latest else None,
        SpecFormat.TEXT,
        view,
        old_label="previous",
        new_label="latest",
    )
    return {
        "previous_client_id": previous.client_id if previous else None,
        "latest_client_id": latest.client_id if latest else None,
        **diff.to_dict(),
    }


@router.post("/clients/preview")
async def preview_client(request: ClientPreviewRequest, user: CurrentUser, workflow: Workflow) -> dict:
    """Generate client code for a spec without storing it."""
    client_code = await workflow.preview(request.file_content, request.version)
    return {"client_code": client_code}
