"""Source resolution for the direct copy path and the read-then-write fallback."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx

from core.errors import (
    SourceUnresolvableError,
    StorageIOError,
    UnsupportedPayloadError,
    UnsupportedSourceError,
)
from uploads.data_url import InvalidDataUrl, parse_data_url

logger = logging.getLogger(__name__)

_REMOTE_SCHEMES = {"http", "https"}


def local_source_path(uri: str) -> Path:
    """Map ``file://`` URIs and bare paths to a local path.

    Raises SourceUnresolvableError for anything the direct copy cannot open.
    """
    parts = urlsplit(uri)
    scheme = parts.scheme.lower()
    # A single letter scheme is a Windows drive ("C:\\...").
    if not scheme or len(scheme) == 1:
        return Path(uri)
    if scheme == "file":
        if parts.netloc not in ("", "localhost"):
            raise SourceUnresolvableError(f"Cannot copy from remote file host: {uri}")
        return Path(url2pathname(parts.path))
    raise SourceUnresolvableError(f"Direct copy does not support {scheme}:// sources")


class SourceReader:
    """Reads a whole source as base64 text for the fallback path."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def read_base64(self, uri: str) -> str:
        scheme = urlsplit(uri).scheme.lower()
        if scheme == "data":
            parsed = parse_data_url(uri)
            if isinstance(parsed, InvalidDataUrl):
                raise UnsupportedPayloadError("Unsupported data URL provided")
            return parsed.body
        if scheme in _REMOTE_SCHEMES:
            content = await self._fetch(uri)
            return base64.b64encode(content).decode("ascii")
        raise UnsupportedSourceError(f"Unsupported source reference: {uri}")

    async def _fetch(self, uri: str) -> bytes:
        logger.debug("Fetching remote source %s", uri)
        try:
            if self._client is not None:
                response = await self._client.get(uri)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout, follow_redirects=True
                ) as client:
                    response = await client.get(uri)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageIOError(
                f"Failed to read {uri}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageIOError(f"Failed to read {uri}: {exc}") from exc
        return response.content


__all__ = ["SourceReader", "local_source_path"]
