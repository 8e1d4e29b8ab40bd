"""Tests for artisync.uploaders.single."""

from __future__ import annotations

import builtins
from pathlib import Path
from typing import IO, Any

import httpx
import pytest

from artisync.core.cancel import CancelToken
from artisync.core.client import TransportClient
from artisync.core.config import Config
from artisync.core.exceptions import (
    FileAccessError,
    FileNotReadableError,
    FileOpenError,
    UploadCancelledError,
)
from artisync.models import UploadRequest
from artisync.uploaders import FileUploader, single
from artisync.uploaders.single import StreamingFileUploader, kilobytes

from .conftest import RecordingSink, RecordingSleeper


class Store:
    """Sync MockTransport handler replaying scripted responses."""

    def __init__(self, script: list[Any] | None = None) -> None:
        self.script = list(script or [])
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []
        self.raised: list[Exception] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(request.read())
        step = self.script.pop(0) if self.script else 200
        if isinstance(step, Exception):
            self.raised.append(step)
            raise step
        return httpx.Response(step)


@pytest.fixture
def payload(temp_dir: Path) -> Path:
    path = temp_dir / "bundle.zip"
    path.write_bytes(b"z" * 5000)
    return path


@pytest.fixture
def opened(monkeypatch: pytest.MonkeyPatch) -> list[IO[bytes]]:
    """Record handles opened by the uploader."""
    handles: list[IO[bytes]] = []

    def spy_open(*args: Any, **kwargs: Any) -> IO[bytes]:
        handle = builtins.open(*args, **kwargs)
        handles.append(handle)
        return handle

    monkeypatch.setattr(single, "open", spy_open, raising=False)
    return handles


def _uploader(store: Store, sleeper: RecordingSleeper, **kwargs: Any) -> StreamingFileUploader:
    client = TransportClient(transport=httpx.MockTransport(store))
    return StreamingFileUploader(client, sleeper=sleeper, chunk_size=2048, **kwargs)


class TestKilobytes:
    def test_rounds_half_up(self):
        assert kilobytes(0) == 0
        assert kilobytes(511) == 0
        assert kilobytes(512) == 1
        assert kilobytes(5000) == 5


class TestPreflight:
    def test_missing_file_cannot_read(self, temp_dir: Path, sleeper: RecordingSleeper):
        store = Store()
        uploader = _uploader(store, sleeper)

        with pytest.raises(FileNotReadableError) as exc_info:
            uploader.upload_file(temp_dir / "missing.zip", "https://store.test/x")

        assert exc_info.value.kind == "cannot_read"
        assert "Cannot read" in str(exc_info.value)
        assert store.requests == []

    def test_unopenable_path_cannot_open(self, temp_dir: Path, sleeper: RecordingSleeper):
        store = Store()
        uploader = _uploader(store, sleeper)

        with pytest.raises(FileOpenError) as exc_info:
            uploader.upload_file(temp_dir, "https://store.test/x")

        assert exc_info.value.kind == "cannot_open"
        assert isinstance(exc_info.value, FileAccessError)
        assert store.requests == []


class TestUploadFile:
    def test_streams_file_body(self, payload: Path, sleeper: RecordingSleeper):
        store = Store()
        uploader = _uploader(store, sleeper)

        response = uploader.upload_file(payload, "https://store.test/bundle.zip")

        assert response.status_code == 200
        assert store.requests[0].method == "PUT"
        assert store.bodies == [payload.read_bytes()]
        assert store.requests[0].headers["Content-Length"] == "5000"

    def test_headers_override_defaults(self, payload: Path, sleeper: RecordingSleeper):
        store = Store()
        uploader = _uploader(store, sleeper)

        uploader.upload_file(
            payload,
            "https://store.test/bundle.zip",
            headers={"Cache-Control": "no-cache", "Content-Type": "application/zip"},
        )

        headers = store.requests[0].headers
        assert headers["Cache-Control"] == "no-cache"
        assert headers["Content-Type"] == "application/zip"

    def test_default_headers_sent(self, payload: Path, sleeper: RecordingSleeper):
        store = Store()
        uploader = _uploader(store, sleeper)

        uploader.upload_file(payload, "https://store.test/bundle.zip")

        assert store.requests[0].headers["Cache-Control"] == "public, max-age=2628000"

    def test_reports_kilobyte_progress(
        self, payload: Path, sleeper: RecordingSleeper, sink: RecordingSink
    ):
        uploader = _uploader(Store(), sleeper)

        uploader.upload_file(payload, "https://store.test/bundle.zip", progress=sink)

        assert sink.calls[0] == ("start", 5)
        progress = [value for name, value in sink.calls if name == "set_progress"]
        assert progress == [2, 4, 5]
        assert sink.finished

    def test_retries_from_start_of_file(self, payload: Path, sleeper: RecordingSleeper):
        store = Store([503, 500, 200])
        uploader = _uploader(store, sleeper)

        response = uploader.upload_file(payload, "https://store.test/bundle.zip")

        assert response.status_code == 200
        assert store.bodies == [payload.read_bytes()] * 3
        assert sleeper.delays == [1.0, 1.0]

    def test_exhaustion_reraises_last_error_unchanged(
        self, payload: Path, sleeper: RecordingSleeper
    ):
        store = Store([httpx.ConnectError("refused") for _ in range(3)])
        uploader = _uploader(store, sleeper, attempts=3)

        with pytest.raises(httpx.ConnectError) as exc_info:
            uploader.upload_file(payload, "https://store.test/bundle.zip")

        assert exc_info.value is store.raised[-1]
        assert len(store.requests) == 3
        assert sleeper.delays == [1.0, 1.0]

    def test_exhaustion_on_status_errors(self, payload: Path, sleeper: RecordingSleeper):
        store = Store([403] * 5)
        uploader = _uploader(store, sleeper)

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            uploader.upload_file(payload, "https://store.test/bundle.zip")

        assert exc_info.value.response.status_code == 403
        assert len(store.requests) == 5

    def test_cancel_during_retry_wait(self, payload: Path, sleeper: RecordingSleeper):
        token = CancelToken()
        token.cancel()
        store = Store([503, 200])
        uploader = _uploader(store, sleeper)

        with pytest.raises(UploadCancelledError):
            uploader.upload_file(payload, "https://store.test/bundle.zip", cancel=token)

        assert len(store.requests) == 1


class TestHandleRelease:
    def test_closed_after_success(
        self, payload: Path, sleeper: RecordingSleeper, opened: list[IO[bytes]]
    ):
        _uploader(Store(), sleeper).upload_file(payload, "https://store.test/bundle.zip")

        assert len(opened) == 1
        assert opened[0].closed

    def test_closed_after_exhaustion(
        self, payload: Path, sleeper: RecordingSleeper, opened: list[IO[bytes]]
    ):
        uploader = _uploader(Store([500] * 2), sleeper, attempts=2)

        with pytest.raises(httpx.HTTPStatusError):
            uploader.upload_file(payload, "https://store.test/bundle.zip")

        assert opened[0].closed

    def test_closed_after_unexpected_exception(
        self, payload: Path, sleeper: RecordingSleeper, opened: list[IO[bytes]]
    ):
        class ExplodingSink(RecordingSink):
            def finish(self) -> None:
                raise RuntimeError("terminal gone")

        uploader = _uploader(Store(), sleeper)

        with pytest.raises(RuntimeError, match="terminal gone"):
            uploader.upload_file(payload, "https://store.test/bundle.zip", progress=ExplodingSink())

        assert opened[0].closed

    def test_closed_after_cancel(
        self, payload: Path, sleeper: RecordingSleeper, opened: list[IO[bytes]]
    ):
        token = CancelToken()
        token.cancel()
        uploader = _uploader(Store([503]), sleeper)

        with pytest.raises(UploadCancelledError):
            uploader.upload_file(payload, "https://store.test/bundle.zip", cancel=token)

        assert opened[0].closed


class TestFileUploader:
    def test_shares_client_between_engines(self, payload: Path, sleeper: RecordingSleeper):
        store = Store([503, 200])
        async_seen: list[httpx.Request] = []

        def async_handler(request: httpx.Request) -> httpx.Response:
            async_seen.append(request)
            return httpx.Response(200)

        config = Config()
        config.upload.default_headers = {"X-Deploy": "artisync"}
        uploader = FileUploader.from_config(
            config,
            sleeper=sleeper,
            transport=httpx.MockTransport(store),
            async_transport=httpx.MockTransport(async_handler),
        )

        with uploader:
            uploader.upload_file(payload, "https://store.test/bundle.zip")
            summary = uploader.batch(
                "PUT", [UploadRequest(key="a", uri="https://store.test/a", body=b"a")]
            )

        assert uploader.scheduler.pool.client is uploader.single.client
        assert store.requests[-1].headers["X-Deploy"] == "artisync"
        assert async_seen[0].headers["X-Deploy"] == "artisync"
        assert summary.succeeded == 1
        assert sleeper.delays == [1.0]
