"""Exception hierarchy for artisync.

Provides typed exceptions for the failure modes the sync engines surface to
callers. Per-file hashing problems and per-request upload failures are never
raised individually; only exhausted retry budgets and pre-flight file problems
reach the caller.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Any


class ArtisyncError(Exception):
    """Base exception for all artisync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ArtisyncError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(ArtisyncError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


def validate_positive(value: int, field: str) -> int:
    """Ensure an integer setting is at least 1.

    Raises:
        ValidationError: If value is below 1.
    """
    if value < 1:
        raise ValidationError(f"{field} must be at least 1", field=field, value=value)
    return value


# =============================================================================
# Local File Errors
# =============================================================================


class FileAccessError(ArtisyncError):
    """A local file could not be used before any network activity."""

    kind = "access"

    def __init__(self, message: str, file_path: str):
        super().__init__(message)
        self.file_path = file_path


class FileNotReadableError(FileAccessError):
    """File is missing or lacks read permission."""

    kind = "cannot_read"

    def __init__(self, file_path: str):
        super().__init__(f'Cannot read the "{file_path}" file', file_path)


class FileOpenError(FileAccessError):
    """File passed the readability check but could not be opened."""

    kind = "cannot_open"

    def __init__(self, file_path: str, cause: OSError | None = None):
        super().__init__(f'Cannot open the "{file_path}" file', file_path)
        self.cause = cause


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(ArtisyncError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during upload."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = dict(details or {})
        if file_path:
            full_details["file"] = file_path
        super().__init__("upload", message, full_details)
        self.file_path = file_path


class BatchUploadError(UploadError):
    """Requests were still failing after the last allowed retry round."""

    def __init__(
        self,
        failed_count: int,
        max_retries: int,
        failed_keys: Sequence[Hashable] = (),
        reasons: dict[Hashable, str] | None = None,
    ):
        super().__init__(f"{failed_count} requests failed after {max_retries} attempts")
        self.failed_count = failed_count
        self.max_retries = max_retries
        self.failed_keys = list(failed_keys)
        self.reasons = reasons or {}

    def __str__(self) -> str:
        return self.message


class UploadCancelledError(UploadError):
    """A cancellation token was set while waiting between attempts."""

    def __init__(self, pending: int = 0):
        super().__init__(
            "Upload cancelled during retry wait",
            details={"pending": pending} if pending else None,
        )
        self.pending = pending


# =============================================================================
# Warnings
# =============================================================================


class DroppedBatchWarning(UserWarning):
    """A hash batch contributed no digests because its worker job failed."""
