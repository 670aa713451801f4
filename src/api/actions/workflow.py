from typing import Annotated

from fastapi import APIRouter, Depends

from schemas.requests import WorkflowRunRequest
from schemas.workflow import WorkflowResult
from services.submission import submit_uploads
from uploads.service import UploadService
from workflow.client import WorkflowClient

from .dependencies import get_upload_service, get_workflow_client

router = APIRouter(prefix="/workflow", tags=["Workflow"])


@router.post("/run", response_model=WorkflowResult)
async def run_workflow(
    body: WorkflowRunRequest,
    service: Annotated[UploadService, Depends(get_upload_service)],
    client: Annotated[WorkflowClient, Depends(get_workflow_client)],
):
    """Encode the selected uploads and submit them to the correction workflow."""
    return await submit_uploads(
        service,
        client,
        student_id=body.student_id,
        subject=body.subject,
        ids=body.ids,
        metadata=body.metadata,
    )
