"""Schema package for external and internal contracts."""

from .uploads import BatchOutcome, EncodedUpload, UploadRecord, UploadRequest
from .workflow import WorkflowImage, WorkflowInput, WorkflowResult

__all__ = [
    "BatchOutcome",
    "EncodedUpload",
    "UploadRecord",
    "UploadRequest",
    "WorkflowImage",
    "WorkflowInput",
    "WorkflowResult",
]
