"""Pydantic model for per-project npm package settings."""

from pydantic import BaseModel, ConfigDict, Field


class NpmConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # npm package names: lowercase, optional @scope/, max 214 chars
    package_name: str = Field(
        ...,
        min_length=1,
        max_length=214,
        pattern=r"^(@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$",
    )
    version: str = Field("1.0.0", pattern=r"^\d+\.\d+\.\d+$")
    description: str | None = Field(None, max_length=2000)
    author: str | None = Field(None, max_length=200)
