"""Upload registry records and encoded payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

UploadStatus = Literal["processing", "ready", "error"]


class UploadRequest(BaseModel):
    """An externally supplied asset reference (picker, camera export or URL)."""

    uri: str = Field(min_length=1)
    file_name: str | None = None
    mime_type: str | None = None

    model_config = ConfigDict(extra="forbid")


class UploadRecord(BaseModel):
    id: str
    original_source: str
    local_path: str
    file_name: str
    mime_type: str
    size_bytes: int | None = None
    status: UploadStatus = "ready"
    error_message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(extra="forbid", frozen=True)


class EncodedUpload(BaseModel):
    id: str
    file_name: str
    mime_type: str
    data_url: str

    model_config = ConfigDict(extra="forbid")


class ItemFailure(BaseModel):
    index: int
    source: str
    error: str

    model_config = ConfigDict(extra="forbid")


class BatchOutcome(BaseModel):
    """Per-item result of a batch ingestion that commits successes independently."""

    records: list[UploadRecord] = Field(default_factory=list)
    failures: list[ItemFailure] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def ok(self) -> bool:
        return not self.failures


class ManifestDocument(BaseModel):
    version: int = 1
    order: list[str] = Field(default_factory=list)
    records: list[UploadRecord] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


__all__ = [
    "BatchOutcome",
    "EncodedUpload",
    "ItemFailure",
    "ManifestDocument",
    "UploadRecord",
    "UploadRequest",
    "UploadStatus",
]
