"""Event-driven function endpoints.

These are called by database webhooks when a spec version row is inserted or
updated, or directly by other services. They answer with flat JSON bodies
(``success`` / ``error``) instead of the API error envelope so that webhook
senders can log them as-is.
"""

import hmac
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from specforge.db.models.spec_version import SpecVersionRow
from specforge.dependencies import DBSession, Workflow
from specforge.errors.exceptions import NotFoundError, SpecForgeError, ValidationError, error_message
from specforge.models.function_payload import FunctionPayload
from specforge.repositories.generated_client_repo import GeneratedClientRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["Functions"])

MISSING_FIELDS = "Missing required fields"


def _check_secret(request: Request) -> JSONResponse | None:
    secret = request.app.state.settings.webhook_secret
    if not secret:
        return None
    supplied = request.headers.get("X-Webhook-Secret", "")
    if hmac.compare_digest(supplied.encode(), secret.encode()):
        return None
    logger.warning("Rejected function call with a bad webhook secret from %s",
                   request.client.host if request.client else "unknown")
    return JSONResponse(status_code=401, content={"error": "Invalid webhook secret"})


async def _payload(request: Request) -> FunctionPayload | JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be JSON"})
    try:
        return FunctionPayload.from_body(body)
    except PydanticValidationError as exc:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid payload", "details": exc.errors(include_url=False, include_context=False)},
        )


def _missing(payload: FunctionPayload, *fields: str) -> JSONResponse | None:
    missing = payload.missing(*fields)
    if not missing:
        return None
    return JSONResponse(status_code=400, content={"error": MISSING_FIELDS, "missing": missing})


def _failure(exc: Exception, action: str) -> JSONResponse:
    """Any failure past payload validation is a 500 for the caller."""
    if isinstance(exc, SpecForgeError):
        logger.error("%s failed: %s", action, exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": f"{action} failed", "details": exc.message, "code": exc.code},
        )
    logger.exception("%s failed unexpectedly", action)
    return JSONResponse(status_code=500, content={"error": f"{action} failed", "details": error_message(exc)})


async def _load_version(workflow, payload: FunctionPayload) -> SpecVersionRow:
    row = await workflow.versions.get(payload.spec_id)
    if row is None or row.project_id != payload.project_id:
        raise NotFoundError("SpecVersion", payload.spec_id)
    return row


@router.post("/generate-client")
async def generate_client_function(request: Request, workflow: Workflow) -> JSONResponse:
    """Generate a client for an uploaded spec version, then publish it.

    A publish failure still answers 200: the client exists and the error is
    reported in ``publish_error``.
    """
    rejected = _check_secret(request)
    if rejected:
        return rejected
    payload = await _payload(request)
    if isinstance(payload, JSONResponse):
        return payload
    missing = _missing(payload, "spec_id", "project_id")
    if missing:
        return missing

    try:
        version = await _load_version(workflow, payload)
        if payload.file_content and payload.file_content != version.file_content:
            raise ValidationError("file_content does not match the stored spec version")
        result = await workflow.run(version)
    except Exception as exc:
        return _failure(exc, "Client generation")

    logger.info("Function generated client %s for version %s", result.client_id, result.version)
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Client generated" + (" and published" if result.published else ""),
            "published": result.published,
            **result.to_dict(),
        },
    )


@router.post("/publish-client")
async def publish_client_function(request: Request, workflow: Workflow) -> JSONResponse:
    """Publish the newest generated client of a ready spec version."""
    rejected = _check_secret(request)
    if rejected:
        return rejected
    payload = await _payload(request)
    if isinstance(payload, JSONResponse):
        return payload
    missing = _missing(payload, "spec_id", "project_id")
    if missing:
        return missing

    try:
        version = await _load_version(workflow, payload)
        result = await workflow.publish(version)
    except Exception as exc:
        return _failure(exc, "Publish")

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Client published successfully",
            "package": {"name": result.package_name, "version": result.version},
            "publisher": result.publisher,
            "output": result.output,
        },
    )


@router.post("/publish-npm")
async def publish_npm_function(request: Request, db: DBSession, workflow: Workflow) -> JSONResponse:
    """Publish one specific generated client under the given version."""
    rejected = _check_secret(request)
    if rejected:
        return rejected
    payload = await _payload(request)
    if isinstance(payload, JSONResponse):
        return payload
    missing = _missing(payload, "spec_id", "project_id", "version", "client_id")
    if missing:
        return missing

    try:
        version = await _load_version(workflow, payload)
        if version.version != payload.version:
            raise ValidationError(
                f"Version {payload.version} does not match stored version {version.version}",
                details={"spec_id": payload.spec_id},
            )
        client = await GeneratedClientRepository(db).get(payload.client_id)
        if client is None or client.version_id != version.version_id:
            raise NotFoundError("GeneratedClient", payload.client_id)
        result = await workflow.publish(version, client)
    except Exception as exc:
        return _failure(exc, "Publish")

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Package published successfully",
            "package": {"name": result.package_name, "version": result.version},
            "client_id": client.client_id,
            "output": result.output,
        },
    )
