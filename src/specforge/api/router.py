"""Master API router mounted at /api/v1."""

from fastapi import APIRouter
from specforge.api.routes import (
    clients,
    functions,
    health,
    npm_config,
    projects,
    publish,
    specs,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(projects.router)
api_router.include_router(npm_config.router)
api_router.include_router(specs.router)
api_router.include_router(clients.router)
api_router.include_router(publish.router)
api_router.include_router(functions.router)
