"""Conversion of cached files into transport-ready data URLs."""

from __future__ import annotations

from pathlib import Path

from persistence.content_store import ContentStore
from persistence.naming import infer_extension, resolve_mime
from uploads.data_url import build_data_url


async def to_data_url(
    store: ContentStore,
    local_path: str | Path,
    mime_type: str | None = None,
) -> str:
    """Read a cached file and return ``data:<mime>;base64,<payload>``."""
    encoded = await store.read_base64(local_path)
    mime = resolve_mime(mime_type, infer_extension(str(local_path)))
    return build_data_url(mime, encoded)


__all__ = ["to_data_url"]
