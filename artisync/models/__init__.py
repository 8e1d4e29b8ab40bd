"""Data models for artisync.

Provides the file descriptor, upload request and progress models shared by
the hashing and upload engines.
"""

from __future__ import annotations

from .base import BaseModel
from .files import FileDescriptor
from .progress import (
    HashSummary,
    NullProgressSink,
    OperationResult,
    ProgressPolicy,
    ProgressSink,
    UploadSummary,
)
from .requests import RequestOutcome, RetryRound, UploadRequest

__all__ = [
    # Base
    "BaseModel",
    # Files
    "FileDescriptor",
    # Requests
    "UploadRequest",
    "RequestOutcome",
    "RetryRound",
    # Progress
    "ProgressSink",
    "NullProgressSink",
    "ProgressPolicy",
    "OperationResult",
    "HashSummary",
    "UploadSummary",
]
