"""Identifier and file-name helpers for the upload directory."""

from __future__ import annotations

import re
from uuid import uuid4

DEFAULT_MIME = "application/octet-stream"

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]")
_EXTENSION_RE = re.compile(r"\.([A-Za-z0-9]+)(?:\?.*)?\Z", re.DOTALL)

# mime -> canonical extension; every entry must round-trip through _EXTENSION_TO_MIME.
_MIME_TO_EXTENSION = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
}
_EXTENSION_TO_MIME = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".heic": "image/heic",
}


def new_id() -> str:
    """Return a process-unique identifier that never contains ``-``."""
    return uuid4().hex


def sanitize_file_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_.-]`` with ``_``."""
    return _UNSAFE_CHARS_RE.sub("_", name)


def infer_extension(name_or_uri: str | None) -> str:
    """Return the lower-cased trailing ``.ext`` (query string ignored) or ``""``."""
    if not name_or_uri:
        return ""
    match = _EXTENSION_RE.search(name_or_uri)
    if not match:
        return ""
    return f".{match.group(1).lower()}"


def extension_for_mime(mime: str | None) -> str:
    if not mime:
        return ""
    return _MIME_TO_EXTENSION.get(mime.strip().lower(), "")


def mime_for_extension(extension: str | None) -> str:
    if not extension:
        return DEFAULT_MIME
    normalized = extension.strip().lower()
    if not normalized.startswith("."):
        normalized = f".{normalized}"
    return _EXTENSION_TO_MIME.get(normalized, DEFAULT_MIME)


def resolve_mime(explicit: str | None, extension: str | None) -> str:
    """Explicit mime wins, then the extension mapping, then the generic type."""
    if explicit:
        return explicit
    if extension:
        return mime_for_extension(extension)
    return DEFAULT_MIME


def compose_file_name(upload_id: str, suggested: str | None, extension: str) -> str:
    """Build the on-disk name ``{id}-{sanitized name}``."""
    base = suggested or f"{upload_id}{extension}"
    return f"{upload_id}-{sanitize_file_name(base)}"


__all__ = [
    "DEFAULT_MIME",
    "compose_file_name",
    "extension_for_mime",
    "infer_extension",
    "mime_for_extension",
    "new_id",
    "resolve_mime",
    "sanitize_file_name",
]
