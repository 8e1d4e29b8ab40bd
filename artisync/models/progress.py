"""Progress reporting contracts and operation summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ProgressSink(Protocol):
    """Receives progress updates from the engines."""

    def start(self, total: int) -> None: ...

    def advance(self, step: int = 1) -> None: ...

    def set_progress(self, value: int) -> None: ...

    def finish(self) -> None: ...


class NullProgressSink:
    """Sink used when the caller supplies none; every call is a no-op."""

    def start(self, total: int) -> None:
        pass

    def advance(self, step: int = 1) -> None:
        pass

    def set_progress(self, value: int) -> None:
        pass

    def finish(self) -> None:
        pass


class ProgressPolicy(Enum):
    """How batch progress is accounted across retry rounds."""

    # Total fixed at the first round's size; advances never pass it.
    CAP = "cap"
    # Each round restarts the sink with that round's pending count.
    REBASE = "rebase"

    @classmethod
    def from_string(cls, value: str) -> ProgressPolicy:
        """Create from string value."""
        return cls(value.lower())


@dataclass
class OperationResult:
    """Generic operation result."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    duration: float = 0.0
    errors: List[str] = field(default_factory=list)


@dataclass
class HashSummary(OperationResult):
    """What a hash_files call did."""

    batches: int = 0
    batches_dropped: int = 0
    algorithm: str = ""

    @property
    def complete(self) -> bool:
        return self.batches_dropped == 0 and self.failed == 0


@dataclass
class UploadSummary(OperationResult):
    """What a batch upload did across its rounds."""

    rounds: int = 0
    round_sizes: List[int] = field(default_factory=list)
    delays: List[float] = field(default_factory=list)
    method: str = ""
    cancelled: bool = False
    last_round_failed: Optional[int] = None
