"""External request schemas for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DataUrlRequest(BaseModel):
    data_url: str = Field(min_length=1)
    suggested_name: str | None = None

    model_config = ConfigDict(extra="forbid")


class EncodeRequest(BaseModel):
    """Upload ids to encode; ``None`` selects every upload in registry order."""

    ids: list[str] | None = None

    model_config = ConfigDict(extra="forbid")


class ErrorReportRequest(BaseModel):
    message: str = Field(min_length=1)

    model_config = ConfigDict(extra="forbid")


class WorkflowRunRequest(BaseModel):
    student_id: str = Field(min_length=1)
    subject: str = "数学"
    ids: list[str] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "DataUrlRequest",
    "EncodeRequest",
    "ErrorReportRequest",
    "WorkflowRunRequest",
]
