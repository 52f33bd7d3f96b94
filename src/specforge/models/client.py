"""Pydantic models for generated clients."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GeneratedClient(BaseModel):
    client_id: str
    project_id: str
    version_id: str
    client_code: str
    created_at: datetime | None = None


class ClientPreviewRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_content: str = Field(..., min_length=1)
    version: str | None = None
