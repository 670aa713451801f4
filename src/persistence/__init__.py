"""Persistence subsystem exports."""

from persistence.content_store import ContentStore
from persistence.manifest import ManifestStore
from persistence.models import CachedFile, FileStat

__all__ = ["CachedFile", "ContentStore", "FileStat", "ManifestStore"]
