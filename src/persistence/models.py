"""Lightweight content store records."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CachedFile:
    id: str
    file_name: str
    mime_type: str
    local_path: Path


@dataclass(frozen=True)
class FileStat:
    exists: bool
    size_bytes: int | None = None


__all__ = ["CachedFile", "FileStat"]
