"""Workflow request and result schemas."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CORRECTION_SUMMARY = "未返回批改结果"


class WorkflowImage(BaseModel):
    file_name: str = Field(serialization_alias="fileName")
    data_url: str = Field(serialization_alias="dataUrl")
    mime_type: str = Field(serialization_alias="mimeType")

    model_config = ConfigDict(extra="forbid")


class WorkflowInput(BaseModel):
    student_id: str
    subject: str
    images: list[WorkflowImage] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def to_request_body(self) -> dict[str, Any]:
        return {
            "inputs": {
                "student_id": self.student_id,
                "subject": self.subject,
                "images": [image.model_dump(by_alias=True) for image in self.images],
                "metadata": dict(self.metadata),
            }
        }


class WorkflowResult(BaseModel):
    correction_summary: str = DEFAULT_CORRECTION_SUMMARY
    explanations: list[str] = Field(default_factory=list)
    follow_up_questions: list[str] = Field(default_factory=list)
    raw: Any | None = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_response(cls, payload: Any) -> "WorkflowResult":
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            data = {}
        return cls(
            correction_summary=_summary_text(data.get("correction_summary")),
            explanations=_string_list(data.get("explanations")),
            follow_up_questions=_string_list(data.get("follow_up_questions")),
            raw=payload,
        )


def _summary_text(value: Any) -> str:
    if value is None:
        return DEFAULT_CORRECTION_SUMMARY
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _string_list(value: Any) -> list[str]:
    """Coerce a list field to strings; a lone scalar or mapping becomes one item."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [_item_text(item) for item in value]
    return [_item_text(value)]


def _item_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


__all__ = [
    "DEFAULT_CORRECTION_SUMMARY",
    "WorkflowImage",
    "WorkflowInput",
    "WorkflowResult",
]
