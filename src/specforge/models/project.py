"""Pydantic models for Project requests and responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from specforge.models.npm_config import NpmConfig


class ProjectCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)


class Project(BaseModel):
    project_id: str
    name: str
    owner_id: str
    created_at: datetime | None = None
    npm_config: NpmConfig | None = None
