"""Upload cache, encoding pipeline and registry."""

from uploads.encoding import to_data_url
from uploads.ingest import Ingestor
from uploads.registry import UploadState, reduce
from uploads.service import BatchPolicy, UploadService

__all__ = [
    "BatchPolicy",
    "Ingestor",
    "UploadService",
    "UploadState",
    "reduce",
    "to_data_url",
]
