from __future__ import annotations

from typing import Any

from pydantic import Field

from repofilter.models import FilterModel


class ErrorInfo(FilterModel):
    type: str
    message: str
    hint: str | None = None
    details: dict[str, Any] | None = None


class CommandMeta(FilterModel):
    duration_ms: int = Field(..., alias="durationMs")
    profile: str | None = None
    allowed_fields: list[str] | None = Field(None, alias="allowedFields")


class CommandResult(FilterModel):
    ok: bool
    command: str
    data: Any | None = None
    warnings: list[str] = Field(default_factory=list)
    meta: CommandMeta
    error: ErrorInfo | None = None
