"""External response schemas for the HTTP API."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from schemas.uploads import UploadRecord


class UploadListResponse(BaseModel):
    uploads: List[UploadRecord] = Field(default_factory=list)
    total_bytes: int = 0
    is_busy: bool = False
    last_error: str | None = None

    model_config = ConfigDict(extra="forbid")


class RemovedResponse(BaseModel):
    removed: str

    model_config = ConfigDict(extra="forbid")


class ClearedResponse(BaseModel):
    cleared: int

    model_config = ConfigDict(extra="forbid")


__all__ = ["ClearedResponse", "RemovedResponse", "UploadListResponse"]
