"""Spec upload, version history and diff routes."""

import logging

from fastapi import APIRouter, File, Form, Query, UploadFile

from specforge.api.access import get_owned_project
from specforge.db.models.spec_version import SpecVersionRow
from specforge.dependencies import AppSettings, CurrentUser, DBSession, Workflow
from specforge.errors.exceptions import NotFoundError, ParseError, SpecForgeError, ValidationError
from specforge.models.enums import DiffView, SpecFormat
from specforge.models.spec import CurrentSpec, SpecParseRequest, SpecUpload, SpecVersion
from specforge.repositories.spec_version_repo import SpecVersionRepository
from specforge.repositories.specification_repo import SpecificationRepository
from specforge.services.spec_parser import detect_format, openapi_warnings
from specforge.services.workflow import SpecWorkflow, version_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Specifications"])


def _version_to_dict(row: SpecVersionRow, workflow: SpecWorkflow | None = None, include_content: bool = False) -> dict:
    document = None
    if include_content and workflow is not None:
        try:
            document = workflow.parse(row.file_content)
        except ParseError:
            document = None
    return SpecVersion(
        version_id=row.version_id,
        project_id=row.project_id,
        spec_id=row.spec_id,
        version=row.version,
        created_at=row.created_at,
        client_ready=row.client_ready,
        is_published=row.is_published,
        published_at=row.published_at,
        publish_error=row.publish_error,
        state=version_state(row),
        file_content=row.file_content if include_content else None,
        document=document,
    ).model_dump(mode="json", exclude_none=True)


async def _get_version(project_id: str, version_id: str, db) -> SpecVersionRow:
    row = await SpecVersionRepository(db).get(version_id)
    if not row or row.project_id != project_id:
        raise NotFoundError("SpecVersion", version_id)
    return row


async def _upload_and_run(
    workflow: SpecWorkflow,
    project_id: str,
    file_content: str,
    filename: str | None,
    generate: bool,
) -> dict:
    row = await workflow.upload(project_id, file_content, filename)
    body: dict = {"version": _version_to_dict(row), "workflow": None}
    if not generate:
        return body

    try:
        result = await workflow.run(row)
    except SpecForgeError as exc:
        # the upload itself succeeded; generation can be retried from the version
        logger.warning("Generation failed for version %s: %s", row.version_id, exc.message)
        body["generation_error"] = exc.message
    else:
        body["workflow"] = result.to_dict()
    body["version"] = _version_to_dict(row)
    return body


@router.post("/projects/{project_id}/specs", status_code=201)
async def upload_spec(
    project_id: str,
    upload: SpecUpload,
    db: DBSession,
    user: CurrentUser,
    settings: AppSettings,
    workflow: Workflow,
) -> dict:
    """Store a new spec version and, by default, generate and publish its client."""
    await get_owned_project(project_id, user, db)
    generate = settings.auto_generate if upload.generate is None else upload.generate
    return await _upload_and_run(workflow, project_id, upload.file_content, upload.filename, generate)


@router.post("/projects/{project_id}/specs/upload", status_code=201)
async def upload_spec_file(
    project_id: str,
    db: DBSession,
    user: CurrentUser,
    settings: AppSettings,
    workflow: Workflow,
    file: UploadFile = File(...),
    generate: bool | None = Form(None),
) -> dict:
    """Multipart variant of the upload for JSON/YAML files."""
    await get_owned_project(project_id, user, db)
    raw = await file.read()
    try:
        file_content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("Uploaded file is not UTF-8 text", details={"filename": file.filename}) from exc
    if not file_content.strip():
        raise ValidationError("Uploaded file is empty")

    should_generate = settings.auto_generate if generate is None else generate
    return await _upload_and_run(workflow, project_id, file_content, file.filename, should_generate)


@router.post("/specs/parse")
async def parse_spec_text(request: SpecParseRequest, user: CurrentUser, workflow: Workflow) -> dict:
    """Parse a spec without storing it."""
    document = workflow.parse(request.file_content, request.filename)
    return {
        "format": detect_format(request.file_content).value,
        "document": document,
        "warnings": openapi_warnings(document),
    }


@router.get("/projects/{project_id}/specs/current")
async def get_current_spec(project_id: str, db: DBSession, user: CurrentUser, workflow: Workflow) -> dict:
    await get_owned_project(project_id, user, db)
    row = await SpecificationRepository(db).get_current(project_id)
    if not row:
        raise NotFoundError("Specification", project_id)

    document = None
    warnings: list[str] = []
    try:
        document = workflow.parse(row.file_content)
        warnings = openapi_warnings(document)
    except ParseError as exc:
        warnings = [f"stored specification could not be parsed: {exc.message}"]

    return CurrentSpec(
        spec_id=row.spec_id,
        project_id=row.project_id,
        version=row.version,
        file_content=row.file_content,
        format=detect_format(row.file_content).value,
        created_at=row.created_at,
        updated_at=row.updated_at,
        document=document,
        warnings=warnings,
    ).model_dump(mode="json", exclude_none=True)


@router.get("/projects/{project_id}/versions")
async def list_versions(project_id: str, db: DBSession, user: CurrentUser) -> list[dict]:
    """Version history, newest first."""
    await get_owned_project(project_id, user, db)
    rows = await SpecVersionRepository(db).list_by_project(project_id)
    return [_version_to_dict(row) for row in rows]


@router.get("/projects/{project_id}/versions/{version_id}")
async def get_version(
    project_id: str, version_id: str, db: DBSession, user: CurrentUser, workflow: Workflow
) -> dict:
    await get_owned_project(project_id, user, db)
    row = await _get_version(project_id, version_id, db)
    return _version_to_dict(row, workflow, include_content=True)


@router.get("/projects/{project_id}/diff")
async def diff_versions(
    project_id: str,
    db: DBSession,
    user: CurrentUser,
    workflow: Workflow,
    base: str | None = Query(None, description="Version id of the old side"),
    target: str | None = Query(None, description="Version id of the new side (default: latest)"),
    format: SpecFormat | None = Query(None),
    view: DiffView = Query(DiffView.SPLIT),
) -> dict:
    """Compare two spec versions; defaults to the latest against its predecessor."""
    await get_owned_project(project_id, user, db)
    history = await SpecVersionRepository(db).list_by_project(project_id)
    by_id = {row.version_id: row for row in history}

    if target is not None and target not in by_id:
        raise NotFoundError("SpecVersion", target)
    if base is not None and base not in by_id:
        raise NotFoundError("SpecVersion", base)

    target_row = by_id[target] if target else (history[0] if history else None)
    if base:
        base_row = by_id[base]
    elif target_row is not None:
        index = history.index(target_row)
        base_row = history[index + 1] if index + 1 < len(history) else None
    else:
        base_row = None

    new_text = target_row.file_content if target_row else None
    old_text = base_row.file_content if base_row else None
    fmt = format or detect_format(new_text or old_text or "")

    diff = workflow.diff(
        old_text,
        new_text,
        fmt,
        view,
        old_label=f"v{base_row.version}" if base_row else "old",
        new_label=f"v{target_row.version}" if target_row else "new",
    )
    return {
        "base": {"version_id": base_row.version_id, "version": base_row.version} if base_row else None,
        "target": {"version_id": target_row.version_id, "version": target_row.version} if target_row else None,
        **diff.to_dict(),
    }


@router.post("/projects/{project_id}/versions/{version_id}/generate")
async def generate_client(
    project_id: str,
    version_id: str,
    db: DBSession,
    user: CurrentUser,
    workflow: Workflow,
    publish: bool = Query(True),
) -> dict:
    """Generate (or regenerate) the client for a version, then publish it."""
    await get_owned_project(project_id, user, db)
    row = await _get_version(project_id, version_id, db)
    result = await workflow.run(row, publish=publish)
    return result.to_dict()


@router.post("/projects/{project_id}/versions/{version_id}/publish")
async def publish_version(
    project_id: str,
    version_id: str,
    db: DBSession,
    user: CurrentUser,
    workflow: Workflow,
) -> dict:
    """Publish the latest generated client of a version."""
    await get_owned_project(project_id, user, db)
    row = await _get_version(project_id, version_id, db)
    result = await workflow.publish(row)
    return {
        "version": _version_to_dict(row),
        "package": {"name": result.package_name, "version": result.version},
        "publisher": result.publisher,
        "output": result.output,
    }
