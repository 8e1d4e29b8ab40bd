"""artisync - concurrent hashing and resilient uploads for artifact sync.

This package provides the two engines behind a deployment tool's
artifact-sync step:
- Parallel content hashing in isolated worker processes
- Bulk uploads with bounded concurrency, retry rounds and exponential backoff
- Single-file streaming uploads with fixed-delay retry
"""

__version__ = "0.1.0"

from artisync.core.client import TransportClient
from artisync.core.config import Config
from artisync.core.exceptions import (
    ArtisyncError,
    BatchUploadError,
    ConfigurationError,
    FileNotReadableError,
    FileOpenError,
    UploadCancelledError,
    ValidationError,
)
from artisync.hashing import ParallelFileHasher
from artisync.models import FileDescriptor, ProgressPolicy, UploadRequest
from artisync.uploaders import BatchUploadScheduler, FileUploader, StreamingFileUploader

__all__ = [
    "__version__",
    "Config",
    "TransportClient",
    "ParallelFileHasher",
    "BatchUploadScheduler",
    "StreamingFileUploader",
    "FileUploader",
    "FileDescriptor",
    "UploadRequest",
    "ProgressPolicy",
    "ArtisyncError",
    "BatchUploadError",
    "ConfigurationError",
    "FileNotReadableError",
    "FileOpenError",
    "UploadCancelledError",
    "ValidationError",
]
