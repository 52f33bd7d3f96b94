"""FastAPI exception handlers producing the standard ErrorResponse envelope."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from specforge.api.middleware.trace_id import TRACE_HEADER
from specforge.errors.exceptions import AuthorizationError, SpecForgeError, error_message
from specforge.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _envelope(request: Request, code: str, message: str, details, status_code: int) -> JSONResponse:
    trace_id = getattr(request.state, "trace_id", "unknown")
    error_response = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            details=details,
            trace_id=trace_id,
            timestamp=datetime.now(timezone.utc),
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
        headers={TRACE_HEADER: trace_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(SpecForgeError)
    async def specforge_error_handler(request: Request, exc: SpecForgeError):
        if isinstance(exc, AuthorizationError):
            user = getattr(request.state, "user", {}) or {}
            logger.warning(
                "project_access_denied",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "user_sub": user.get("sub", "anonymous"),
                    "reason": str(exc),
                },
            )
        elif exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return _envelope(request, exc.code, exc.message, exc.details, exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(
            request,
            "INTERNAL_ERROR",
            error_message(exc),
            {"type": type(exc).__name__},
            500,
        )
