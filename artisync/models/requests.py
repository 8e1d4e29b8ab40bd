"""Upload request models and per-round scheduler state."""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import IO, Optional, Union

import httpx

RequestBody = Union[bytes, IO[bytes]]


@dataclass(frozen=True)
class UploadRequest:
    """One keyed request to the remote store.

    ``key`` identifies the request across retry rounds.
    """

    key: Hashable
    uri: str
    body: Optional[RequestBody] = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestOutcome:
    """Resolution of one request within a pool round."""

    key: Hashable
    request: UploadRequest
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.response is not None

    @property
    def reason(self) -> str:
        """Short description of why the request failed."""
        if self.error is not None:
            return f"{type(self.error).__name__}: {self.error}"
        return ""


@dataclass
class RetryRound:
    """State of one scheduler round."""

    pending: dict[Hashable, UploadRequest]
    attempts_remaining: int
    base_delay: float
    number: int = 1

    @property
    def size(self) -> int:
        return len(self.pending)

    def next(self, failed: dict[Hashable, UploadRequest]) -> RetryRound:
        """Round that re-submits ``failed`` with one attempt fewer."""
        return RetryRound(
            pending=failed,
            attempts_remaining=self.attempts_remaining - 1,
            base_delay=self.base_delay,
            number=self.number + 1,
        )
