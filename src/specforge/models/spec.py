"""Pydantic models for spec uploads, versions and diffs."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from specforge.models.enums import VersionState


class SpecUpload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_content: str = Field(..., min_length=1)
    filename: str | None = None
    generate: bool | None = None


class SpecParseRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_content: str = Field(..., min_length=1)
    filename: str | None = None


class SpecVersion(BaseModel):
    version_id: str
    project_id: str
    spec_id: str
    version: str
    created_at: datetime | None = None
    client_ready: bool
    is_published: bool
    published_at: datetime | None = None
    publish_error: str | None = None
    state: VersionState
    file_content: str | None = None
    document: dict[str, Any] | None = None


class CurrentSpec(BaseModel):
    spec_id: str
    project_id: str
    version: str | None = None
    file_content: str
    format: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    document: dict[str, Any] | None = None
    warnings: list[str] = []
