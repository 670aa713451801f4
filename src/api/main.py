from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.config import Settings, get_settings
from core.errors import (
    CacheWriteError,
    ConfigurationError,
    SourceUnresolvableError,
    StorageIOError,
    StudymarkError,
    UnsupportedPayloadError,
    UnsupportedSourceError,
    UploadNotFoundError,
    WorkflowError,
)
from uploads.service import UploadService
from workflow.client import WorkflowClient

from .actions import config, health, uploads, workflow

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (UploadNotFoundError, 404),
    (UnsupportedPayloadError, 422),
    (UnsupportedSourceError, 422),
    (SourceUnresolvableError, 422),
    (CacheWriteError, 400),
    (WorkflowError, 502),
    (ConfigurationError, 500),
    (StorageIOError, 500),
]


def _status_for(exc: Exception) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def create_app(
    settings: Settings | None = None,
    *,
    service: UploadService | None = None,
    workflow_client: WorkflowClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.upload_service.load()
        yield

    app = FastAPI(title="Studymark API", lifespan=lifespan)
    app.state.settings = settings
    app.state.upload_service = service or UploadService.from_settings(settings)
    app.state.workflow_client = workflow_client or WorkflowClient(settings)

    @app.exception_handler(StudymarkError)
    async def handle_studymark_error(request: Request, exc: StudymarkError):
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def handle_value_error(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    app.include_router(health.router)
    app.include_router(config.router)
    app.include_router(uploads.router)
    app.include_router(workflow.router)
    return app


app = create_app()
