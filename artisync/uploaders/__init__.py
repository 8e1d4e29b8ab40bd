"""Upload engines for artisync.

- Bounded request pool (async requests under an in-flight cap)
- Batch upload scheduler (round-based retry with exponential backoff)
- Streaming single-file uploader (fixed-delay retry)
"""

from artisync.uploaders.batch import BatchUploadScheduler
from artisync.uploaders.common import (
    backoff_delay,
    body_content,
    freeze_bodies,
    check_response,
    is_failure_status,
    key_requests,
)
from artisync.uploaders.constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_FILE_ATTEMPTS,
    DEFAULT_FILE_RETRY_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_STREAM_CHUNK_SIZE,
    DEFAULT_UPLOAD_CONCURRENCY,
)
from artisync.uploaders.pool import BoundedRequestPool
from artisync.uploaders.single import StreamingFileUploader, kilobytes
from artisync.uploaders.uploader import FileUploader

__all__ = [
    # Constants
    "DEFAULT_BASE_DELAY",
    "DEFAULT_FILE_ATTEMPTS",
    "DEFAULT_FILE_RETRY_DELAY",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_STREAM_CHUNK_SIZE",
    "DEFAULT_UPLOAD_CONCURRENCY",
    # Common utilities
    "backoff_delay",
    "body_content",
    "freeze_bodies",
    "check_response",
    "is_failure_status",
    "key_requests",
    # Engines
    "BoundedRequestPool",
    "BatchUploadScheduler",
    "StreamingFileUploader",
    "FileUploader",
    "kilobytes",
]
