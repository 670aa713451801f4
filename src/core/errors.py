"""Error taxonomy shared by the upload cache, registry and workflow client."""

from __future__ import annotations


class StudymarkError(Exception):
    """Base class for every error raised by this project."""


class ConfigurationError(StudymarkError):
    """Required external configuration is missing."""


class UnsupportedPayloadError(StudymarkError, ValueError):
    """An inline payload does not have the ``data:<mime>;base64,<body>`` shape."""


class StorageIOError(StudymarkError, OSError):
    """A read, write, copy or stat inside the content store failed."""


class SourceUnresolvableError(StorageIOError):
    """The direct copy path cannot read the given source reference."""


class UnsupportedSourceError(StorageIOError):
    """Neither the direct copy nor the fallback reader understands the source."""


class CacheWriteError(StorageIOError):
    """The destination is missing or empty after a copy or write."""

    def __init__(self, source: str) -> None:
        super().__init__(f"Failed to cache file from uri: {source}")
        self.source = source


class UploadNotFoundError(StudymarkError, KeyError):
    def __init__(self, upload_id: str) -> None:
        super().__init__(f"Upload {upload_id} not found")
        self.upload_id = upload_id

    def __str__(self) -> str:
        return str(self.args[0])


class WorkflowError(StudymarkError):
    """The remote workflow call failed at the transport or HTTP level."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RegistryInvariantError(StudymarkError, AssertionError):
    """The upload registry order and map went out of sync."""


__all__ = [
    "CacheWriteError",
    "ConfigurationError",
    "RegistryInvariantError",
    "SourceUnresolvableError",
    "StorageIOError",
    "StudymarkError",
    "UnsupportedPayloadError",
    "UnsupportedSourceError",
    "UploadNotFoundError",
    "WorkflowError",
]
