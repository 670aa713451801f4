"""Async orchestration of ingestion, encoding and the upload registry."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from core.config import Settings
from core.errors import UploadNotFoundError
from persistence.content_store import ContentStore
from persistence.manifest import ManifestStore
from persistence.models import CachedFile
from schemas.uploads import (
    BatchOutcome,
    EncodedUpload,
    ItemFailure,
    UploadRecord,
    UploadRequest,
)
from uploads import registry
from uploads.encoding import to_data_url
from uploads.ingest import Ingestor
from uploads.registry import UploadEvent, UploadState
from uploads.sources import SourceReader

logger = logging.getLogger(__name__)


class BatchPolicy(str, Enum):
    ALL_OR_NOTHING = "all_or_nothing"
    PARTIAL = "partial"


class UploadService:
    """Owns one registry state and the content store behind it.

    ``is_busy`` is advisory only; callers that need mutual exclusion between
    batches, or ordering of operations on the same id, must add it themselves.
    """

    def __init__(
        self,
        store: ContentStore,
        *,
        manifest: ManifestStore | None = None,
        reader: SourceReader | None = None,
        state: UploadState | None = None,
    ) -> None:
        self._store = store
        self._manifest = manifest
        self._ingestor = Ingestor(store, reader)
        self._state = state or registry.initial_state()

    @classmethod
    def from_settings(
        cls, settings: Settings, *, reader: SourceReader | None = None
    ) -> "UploadService":
        manifest_path = settings.manifest_path
        return cls(
            ContentStore(settings.upload_dir),
            manifest=ManifestStore(manifest_path) if manifest_path else None,
            reader=reader or SourceReader(timeout=settings.fetch_timeout),
        )

    @property
    def store(self) -> ContentStore:
        return self._store

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return registry.is_busy(self._state)

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    def list_uploads(self) -> list[UploadRecord]:
        return registry.select_list(self._state)

    def get(self, upload_id: str) -> UploadRecord | None:
        return registry.select_by_id(self._state, upload_id)

    def total_size(self) -> int:
        return registry.total_size(self._state)

    async def load(self) -> UploadState:
        """Rebuild the registry from the manifest, dropping records whose file is gone."""
        await self._store.ensure_directory()
        if self._manifest is None:
            return self._state
        document = await self._manifest.load()
        records: list[UploadRecord] = []
        for record in document.records:
            info = await self._store.stat(record.local_path)
            if not info.exists or not self._store.contains(record.local_path):
                logger.warning("Dropping upload %s: cached file missing", record.id)
                continue
            records.append(record)
        self._state = registry.reduce(
            self._state,
            registry.Restored(records=tuple(records), order=tuple(document.order)),
        )
        return self._state

    async def cache_uploads(
        self,
        requests: Sequence[UploadRequest],
        *,
        policy: BatchPolicy = BatchPolicy.ALL_OR_NOTHING,
    ) -> BatchOutcome:
        """Ingest every request concurrently and commit the batch to the registry."""
        await self._dispatch(registry.CacheStarted())
        results = await asyncio.gather(
            *(self._cache_one(request) for request in requests),
            return_exceptions=True,
        )

        records: list[UploadRecord] = []
        failures: list[tuple[int, UploadRequest, BaseException]] = []
        for index, (request, result) in enumerate(zip(requests, results)):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures.append((index, request, result))
            else:
                records.append(result)

        if failures and policy == BatchPolicy.ALL_OR_NOTHING:
            _, request, error = failures[0]
            logger.warning("Batch of %d uploads failed at %s: %s", len(requests), request.uri, error)
            try:
                for record in records:
                    await self._store.delete(record.local_path)
            finally:
                await self._dispatch(registry.CacheFailed(message=str(error)))
            raise error

        await self._dispatch(registry.CacheSucceeded(records=tuple(records)))
        outcome = BatchOutcome(
            records=records,
            failures=[
                ItemFailure(index=index, source=request.uri, error=str(error))
                for index, request, error in failures
            ],
        )
        if failures:
            await self._dispatch(registry.OperationFailed(message=outcome.failures[0].error))
        logger.info("Cached %d uploads (%d failed)", len(records), len(failures))
        return outcome

    async def ingest_data_url(
        self,
        data_url: str,
        suggested_name: str | None = None,
    ) -> UploadRecord:
        try:
            cached = await self._ingestor.adopt_inline(data_url, suggested_name)
        except Exception as exc:
            await self._dispatch(registry.OperationFailed(message=str(exc)))
            raise
        record = await self._build_record(cached, original_source=data_url)
        await self._dispatch(registry.Ingested(record=record))
        return record

    async def encode_selection(self, ids: Iterable[str] | None = None) -> list[EncodedUpload]:
        """Encode the selected uploads (all of them by default) in registry order."""
        state = self._state
        target_ids = list(ids) if ids is not None else list(state.order)
        for upload_id in target_ids:
            if upload_id not in state.by_id:
                raise UploadNotFoundError(upload_id)

        async def encode(upload_id: str) -> EncodedUpload:
            record = state.by_id[upload_id]
            data_url = await to_data_url(self._store, record.local_path, record.mime_type)
            return EncodedUpload(
                id=upload_id,
                file_name=record.file_name,
                mime_type=record.mime_type,
                data_url=data_url,
            )

        try:
            return list(await asyncio.gather(*(encode(upload_id) for upload_id in target_ids)))
        except Exception as exc:
            await self._dispatch(registry.OperationFailed(message=str(exc)))
            raise

    async def remove(self, upload_id: str) -> None:
        record = self.get(upload_id)
        if record is None:
            return
        await self._store.delete(record.local_path)
        await self._dispatch(registry.Removed(upload_id=upload_id))

    async def clear_all(self) -> None:
        await self._store.purge_all()
        await self._dispatch(registry.Cleared())

    async def report_error(self, upload_id: str, message: str) -> None:
        await self._dispatch(registry.ErrorReported(upload_id=upload_id, message=message))

    async def _cache_one(self, request: UploadRequest) -> UploadRecord:
        cached = await self._ingestor.adopt_external(
            request.uri, request.file_name, request.mime_type
        )
        return await self._build_record(cached, original_source=request.uri)

    async def _build_record(self, cached: CachedFile, *, original_source: str) -> UploadRecord:
        info = await self._store.stat(cached.local_path)
        return UploadRecord(
            id=cached.id,
            original_source=original_source,
            local_path=str(Path(cached.local_path)),
            file_name=cached.file_name,
            mime_type=cached.mime_type,
            size_bytes=info.size_bytes if info.exists else None,
            status="ready",
        )

    async def _dispatch(self, event: UploadEvent) -> None:
        previous = self._state
        self._state = registry.reduce(previous, event)
        if self._manifest is not None and (
            self._state.by_id is not previous.by_id or self._state.order != previous.order
        ):
            await self._manifest.save(self._state.order, registry.select_list(self._state))


__all__ = ["BatchPolicy", "UploadService"]
