"""Submit cached uploads to the correction workflow."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from core.errors import WorkflowError
from schemas.workflow import WorkflowImage, WorkflowInput, WorkflowResult
from uploads.service import UploadService
from workflow.client import WorkflowClient

logger = logging.getLogger(__name__)

SUBMISSION_SOURCE = "studymark"


async def submit_uploads(
    service: UploadService,
    client: WorkflowClient,
    *,
    student_id: str,
    subject: str,
    ids: Iterable[str] | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> WorkflowResult:
    """Encode the selected uploads and run the workflow on them.

    A workflow failure is recorded against every submitted upload before it
    propagates to the caller.
    """
    if not student_id or not student_id.strip():
        raise ValueError("student_id is required.")

    encoded = await service.encode_selection(ids)
    if not encoded:
        raise ValueError("No uploads to submit.")

    workflow_input = WorkflowInput(
        student_id=student_id.strip(),
        subject=subject,
        images=[
            WorkflowImage(
                file_name=item.file_name,
                data_url=item.data_url,
                mime_type=item.mime_type,
            )
            for item in encoded
        ],
        metadata={
            "source": SUBMISSION_SOURCE,
            "upload_count": len(encoded),
            **dict(metadata or {}),
        },
    )

    try:
        return await client.run(workflow_input)
    except WorkflowError as exc:
        logger.warning("Workflow submission failed: %s", exc)
        for item in encoded:
            await service.report_error(item.id, str(exc))
        raise


__all__ = ["SUBMISSION_SOURCE", "submit_uploads"]
