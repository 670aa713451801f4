"""Ingestion of external sources and inline payloads into the content store."""

from __future__ import annotations

import logging
from pathlib import Path

from core.errors import CacheWriteError, SourceUnresolvableError, UnsupportedPayloadError
from persistence.content_store import ContentStore
from persistence.models import CachedFile
from persistence.naming import (
    compose_file_name,
    extension_for_mime,
    infer_extension,
    new_id,
    resolve_mime,
)
from uploads.data_url import InvalidDataUrl, parse_data_url
from uploads.sources import SourceReader, local_source_path

logger = logging.getLogger(__name__)


class Ingestor:
    def __init__(self, store: ContentStore, reader: SourceReader | None = None) -> None:
        self._store = store
        self._reader = reader or SourceReader()

    @property
    def store(self) -> ContentStore:
        return self._store

    async def adopt_external(
        self,
        uri: str,
        file_name: str | None = None,
        mime_type: str | None = None,
    ) -> CachedFile:
        """Copy an external source into the upload directory."""
        await self._store.ensure_directory()

        upload_id = new_id()
        extension = infer_extension(file_name) or infer_extension(uri)
        final_name = compose_file_name(upload_id, file_name, extension)

        destination = await self._copy_with_fallback(uri, final_name)

        info = await self._store.stat(destination)
        if not info.exists or not info.size_bytes:
            await self._store.delete(destination)
            raise CacheWriteError(uri)

        return CachedFile(
            id=upload_id,
            file_name=final_name,
            mime_type=resolve_mime(mime_type, extension),
            local_path=destination,
        )

    async def adopt_inline(
        self,
        data_url: str,
        suggested_name: str | None = None,
    ) -> CachedFile:
        """Decode a ``data:`` URL into a new cached file."""
        parsed = parse_data_url(data_url)
        if isinstance(parsed, InvalidDataUrl):
            logger.debug("Rejected inline payload: %s", parsed.reason)
            raise UnsupportedPayloadError("Unsupported data URL provided")

        await self._store.ensure_directory()
        upload_id = new_id()
        extension = infer_extension(suggested_name) or extension_for_mime(parsed.mime)
        final_name = compose_file_name(upload_id, suggested_name, extension)

        destination = await self._store.write_bytes(final_name, parsed.data)
        return CachedFile(
            id=upload_id,
            file_name=final_name,
            mime_type=parsed.mime,
            local_path=destination,
        )

    async def _copy_with_fallback(self, uri: str, name: str) -> Path:
        try:
            source = local_source_path(uri)
        except SourceUnresolvableError as exc:
            logger.debug("Direct copy unavailable for %s (%s); reading through fallback", uri, exc)
            encoded = await self._reader.read_base64(uri)
            return await self._store.write_base64(name, encoded)
        return await self._store.copy_from(source, name)


__all__ = ["Ingestor"]
