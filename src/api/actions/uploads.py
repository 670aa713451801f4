from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.requests import DataUrlRequest, EncodeRequest, ErrorReportRequest
from schemas.responses import ClearedResponse, RemovedResponse, UploadListResponse
from schemas.uploads import BatchOutcome, EncodedUpload, UploadRecord, UploadRequest
from uploads.service import BatchPolicy, UploadService

from .dependencies import get_upload_service

router = APIRouter(prefix="/uploads", tags=["Uploads"])

ServiceDep = Annotated[UploadService, Depends(get_upload_service)]


@router.get("", response_model=UploadListResponse)
async def list_uploads(service: ServiceDep):
    """List cached uploads, most recent first."""
    return UploadListResponse(
        uploads=service.list_uploads(),
        total_bytes=service.total_size(),
        is_busy=service.is_busy,
        last_error=service.last_error,
    )


@router.post("", response_model=BatchOutcome)
async def cache_uploads(
    requests: list[UploadRequest],
    service: ServiceDep,
    partial: bool = Query(False, description="Commit successful items even if others fail."),
):
    """
    Cache a batch of external sources.

    Without ``partial`` the batch is all-or-nothing: any failing item rejects
    the whole request and no record is created.
    """
    policy = BatchPolicy.PARTIAL if partial else BatchPolicy.ALL_OR_NOTHING
    return await service.cache_uploads(requests, policy=policy)


@router.post("/data-url", response_model=UploadRecord)
async def ingest_data_url(body: DataUrlRequest, service: ServiceDep):
    return await service.ingest_data_url(body.data_url, body.suggested_name)


@router.post("/encode", response_model=list[EncodedUpload])
async def encode_uploads(body: EncodeRequest, service: ServiceDep):
    return await service.encode_selection(body.ids)


@router.get("/{upload_id}", response_model=UploadRecord)
async def get_upload(upload_id: str, service: ServiceDep):
    record = service.get(upload_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Upload {upload_id} not found")
    return record


@router.post("/{upload_id}/error", response_model=UploadRecord)
async def report_upload_error(upload_id: str, body: ErrorReportRequest, service: ServiceDep):
    if service.get(upload_id) is None:
        raise HTTPException(status_code=404, detail=f"Upload {upload_id} not found")
    await service.report_error(upload_id, body.message)
    return service.get(upload_id)


@router.delete("/{upload_id}", response_model=RemovedResponse)
async def remove_upload(upload_id: str, service: ServiceDep):
    await service.remove(upload_id)
    return RemovedResponse(removed=upload_id)


@router.delete("", response_model=ClearedResponse)
async def clear_uploads(service: ServiceDep):
    count = len(service.list_uploads())
    await service.clear_all()
    return ClearedResponse(cleared=count)
