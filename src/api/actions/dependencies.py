from fastapi import Request

from uploads.service import UploadService
from workflow.client import WorkflowClient


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_workflow_client(request: Request) -> WorkflowClient:
    return request.app.state.workflow_client
