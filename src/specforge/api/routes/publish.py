"""Multipart publish endpoint: a manifest file plus the module it names."""

import json
import logging

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import JSONResponse

from specforge.dependencies import CurrentUser
from specforge.errors.exceptions import ConfigMissingError, SpecForgeError, ValidationError, error_message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Publishing"])


async def _read_manifest(upload: UploadFile) -> dict:
    raw = await upload.read()
    try:
        manifest = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ValidationError(f"package.json is not valid JSON: {exc}") from exc
    if not isinstance(manifest, dict):
        raise ValidationError("package.json must contain a JSON object")
    return manifest


async def _read_module(upload: UploadFile) -> str:
    try:
        return (await upload.read()).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("index.js must be UTF-8 encoded text") from exc


@router.post("/publish-npm")
async def publish_npm(
    request: Request,
    user: CurrentUser,
    package_json: UploadFile | None = File(None, alias="package.json"),
    index_js: UploadFile | None = File(None, alias="index.js"),
) -> JSONResponse:
    """Publish an uploaded package with the server's npm token.

    Responds ``{message, details}`` on success and ``{message}`` on failure.
    """
    if package_json is None or index_js is None:
        return JSONResponse(status_code=400, content={"message": "Missing package.json or index.js file"})

    executor = request.app.state.npm_executor
    try:
        manifest = await _read_manifest(package_json)
        module_body = await _read_module(index_js)
        result = await executor.publish(manifest, module_body)
    except (ConfigMissingError, ValidationError) as exc:
        return JSONResponse(status_code=400, content={"message": exc.message})
    except SpecForgeError as exc:
        logger.error("Publish of uploaded package failed: %s", exc.message)
        return JSONResponse(status_code=500, content={"message": exc.message})
    except Exception as exc:
        logger.exception("Unexpected error publishing uploaded package")
        return JSONResponse(status_code=500, content={"message": error_message(exc)})

    return JSONResponse(
        status_code=200,
        content={"message": "Package published successfully", "details": result.output},
    )
