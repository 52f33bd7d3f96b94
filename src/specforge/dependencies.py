"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from specforge.config import Settings
from specforge.errors.exceptions import AuthenticationError
from specforge.services.workflow import SpecWorkflow


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_settings(request: Request) -> Settings:
    """Return the settings object the app was started with."""
    return request.app.state.settings


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")


async def get_current_user(request: Request) -> dict:
    """Return the authenticated user dict or raise 401."""
    user = getattr(request.state, "user", {})
    if "_auth_error" in user:
        raise AuthenticationError(user["_auth_error"])
    if not user or user.get("sub") in ("anonymous", ""):
        raise AuthenticationError("Authentication required")
    return user


async def get_workflow(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> SpecWorkflow:
    """Build the workflow over this request's session and the app's collaborators."""
    state = request.app.state
    return SpecWorkflow(
        db,
        generator=state.generator,
        publisher=state.publisher,
        bump_policy=state.settings.version_bump,
    )


# Type aliases for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
TraceId = Annotated[str, Depends(get_trace_id)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Workflow = Annotated[SpecWorkflow, Depends(get_workflow)]
