"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from specforge.config import Settings, settings as default_settings
from specforge.db.engine import create_db_engine, create_session_factory, create_tables
from specforge.integrations.base import PackagePublisher, TextGenerator
from specforge.integrations.gemini import GeminiGenerator
from specforge.integrations.github_dispatch import GitHubDispatchPublisher
from specforge.logging_config import configure_logging
from specforge.models.enums import PublishMode
from specforge.services.publisher import NpmPublishExecutor

logger = logging.getLogger(__name__)


def build_generator(settings: Settings) -> TextGenerator:
    return GeminiGenerator(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        model=settings.gemini_model,
        timeout=settings.gemini_timeout_seconds,
    )


def build_npm_executor(settings: Settings) -> NpmPublishExecutor:
    return NpmPublishExecutor(
        token=settings.npm_token,
        registry_host=settings.npm_registry_host,
        command=settings.npm_publish_command,
        timeout=settings.npm_publish_timeout_seconds,
        notice_prefixes=settings.npm_notice_prefixes,
    )


def build_publisher(settings: Settings) -> PackagePublisher:
    """Select the publish path configured by ``publish_mode``."""
    if settings.publish_mode == PublishMode.GITHUB_DISPATCH:
        return GitHubDispatchPublisher(
            token=settings.github_token,
            owner=settings.github_owner,
            repo=settings.github_repo,
            api_url=settings.github_api_url,
        )
    return build_npm_executor(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings: Settings = app.state.settings
    if settings.require_credentials:
        settings.ensure_credentials()
    else:
        missing = settings.missing_credentials()
        if missing:
            logger.warning("Running without credentials: %s", ", ".join(missing))

    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    if settings.auto_create_tables or "sqlite" in db_url:
        await create_tables(engine)
        logger.info("Database tables ensured")

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)

    logger.info("SpecForge API started (db=%s, publish=%s)",
                "sqlite" if "sqlite" in db_url else "postgresql", settings.publish_mode)
    yield

    await engine.dispose()
    logger.info("SpecForge API shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or default_settings
    configure_logging(log_level=settings.log_level, json_output=settings.json_logs and not settings.local_mode)

    app = FastAPI(
        title="SpecForge API",
        version="1.0.0",
        description="Versioned OpenAPI specs, AI-generated JavaScript clients and npm publishing.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.generator = build_generator(settings)
    app.state.publisher = build_publisher(settings)
    app.state.npm_executor = build_npm_executor(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add middleware (order matters: last added = first executed)
    from specforge.api.middleware.auth import AuthMiddleware
    from specforge.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(AuthMiddleware)
    app.add_middleware(TraceIdMiddleware)

    from specforge.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    # Prometheus metrics (internal endpoint)
    from prometheus_fastapi_instrumentator import Instrumentator
    Instrumentator(
        should_group_status_codes=True,
        should_respect_env_var=False,
        excluded_handlers=["/api/v1/health.*", "/metrics"],
    ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    from specforge.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
