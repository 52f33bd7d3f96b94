"""Payloads accepted by the event-driven function endpoints.

Database webhooks wrap the changed row as ``{"type": ..., "record": {...}}``;
direct callers send the fields flat. Both shapes normalize to one model.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class FunctionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    spec_id: str | None = None
    project_id: str | None = None
    version: str | None = None
    file_content: str | None = None
    client_id: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> "FunctionPayload":
        if not isinstance(body, dict):
            return cls()
        record = body.get("record")
        if body.get("type") and isinstance(record, dict):
            return cls(
                spec_id=record.get("id"),
                project_id=record.get("project_id"),
                version=record.get("version"),
                file_content=record.get("file_content"),
            )
        return cls.model_validate(body)

    def missing(self, *fields: str) -> list[str]:
        return [name for name in fields if not getattr(self, name)]
