"""Pytest configuration and fixtures for artisync tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator, Optional

import pytest

from artisync.core.cancel import CancelToken


class RecordingSleeper:
    """Sleeper that records requested waits instead of blocking."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float, cancel: Optional[CancelToken] = None) -> bool:
        self.delays.append(seconds)
        return cancel is not None and cancel.cancelled


class RecordingSink:
    """ProgressSink that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self.total: Optional[int] = None
        self.value = 0
        self.finished = False

    def start(self, total: int) -> None:
        self.calls.append(("start", total))
        self.total = total
        self.value = 0

    def advance(self, step: int = 1) -> None:
        self.calls.append(("advance", step))
        self.value += step

    def set_progress(self, value: int) -> None:
        self.calls.append(("set_progress", value))
        self.value = value

    def finish(self) -> None:
        self.calls.append(("finish", 0))
        self.finished = True

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
hashing:
  concurrency: 4
  chunk_size: 25
  job_timeout: 60
  strict: true
  algorithm: sha256

upload:
  concurrency: 10
  connect_timeout: 5
  timeout: 120
  max_retries: 3
  progress_policy: rebase
  default_headers:
    Cache-Control: no-cache
    X-Deploy: artisync
"""
