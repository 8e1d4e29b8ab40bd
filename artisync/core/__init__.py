"""Core modules for artisync."""

from artisync.core.cancel import CancelToken, interruptible_sleep
from artisync.core.client import TransportClient, merge_headers
from artisync.core.config import (
    CONFIG_DIR,
    CONFIG_FILE,
    DEFAULT_HEADERS,
    Config,
    HashSettings,
    UploadSettings,
)
from artisync.core.exceptions import (
    ArtisyncError,
    BatchUploadError,
    ConfigurationError,
    DroppedBatchWarning,
    FileAccessError,
    FileNotReadableError,
    FileOpenError,
    OperationError,
    UploadCancelledError,
    UploadError,
    ValidationError,
)
from artisync.core.logging import LogContext, get_logger, log_context, setup_logging
from artisync.core.output import RichProgressSink, console, create_progress

__all__ = [
    # Exceptions
    "ArtisyncError",
    "BatchUploadError",
    "ConfigurationError",
    "DroppedBatchWarning",
    "FileAccessError",
    "FileNotReadableError",
    "FileOpenError",
    "OperationError",
    "UploadCancelledError",
    "UploadError",
    "ValidationError",
    # Config
    "Config",
    "HashSettings",
    "UploadSettings",
    "CONFIG_DIR",
    "CONFIG_FILE",
    "DEFAULT_HEADERS",
    # Client
    "TransportClient",
    "merge_headers",
    # Cancellation
    "CancelToken",
    "interruptible_sleep",
    # Output
    "RichProgressSink",
    "console",
    "create_progress",
    # Logging
    "get_logger",
    "setup_logging",
    "log_context",
    "LogContext",
]
