"""Single-file streaming upload with fixed-delay retry."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import IO, Any, Optional, TypeVar, Union

import httpx

from artisync.core.cancel import CancelToken, Sleeper, interruptible_sleep
from artisync.core.client import TransportClient
from artisync.core.exceptions import (
    FileNotReadableError,
    FileOpenError,
    UploadCancelledError,
    validate_positive,
)
from artisync.models.progress import NullProgressSink, ProgressSink
from artisync.uploaders.common import check_response
from artisync.uploaders.constants import (
    DEFAULT_FILE_ATTEMPTS,
    DEFAULT_FILE_RETRY_DELAY,
    DEFAULT_STREAM_CHUNK_SIZE,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def kilobytes(size: int) -> int:
    """Bytes to kilobytes, rounding halves up."""
    return int(size / 1024 + 0.5)


class StreamingFileUploader:
    """PUTs one file as a streamed body, retrying with a constant delay."""

    def __init__(
        self,
        client: TransportClient,
        attempts: int = DEFAULT_FILE_ATTEMPTS,
        retry_delay: float = DEFAULT_FILE_RETRY_DELAY,
        *,
        chunk_size: int = DEFAULT_STREAM_CHUNK_SIZE,
        sleeper: Optional[Sleeper] = None,
    ) -> None:
        self.client = client
        self.attempts = validate_positive(attempts, "attempts")
        self.retry_delay = retry_delay
        self.chunk_size = validate_positive(chunk_size, "chunk_size")
        self.sleeper: Sleeper = sleeper or interruptible_sleep

    def upload_file(
        self,
        file_path: Union[str, Path],
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelToken] = None,
    ) -> httpx.Response:
        """Upload the file at ``file_path`` to ``url``.

        Args:
            file_path: Local file to send.
            url: Destination URL (typically a pre-signed PUT URL).
            headers: Headers overriding the client defaults.
            progress: Optional sink fed with kilobytes sent.
            cancel: Optional token that aborts a retry wait.

        Returns:
            The successful response.

        Raises:
            FileNotReadableError: The file is missing or not readable.
            FileOpenError: The file could not be opened.
            UploadCancelledError: ``cancel`` fired during a retry wait.
            Exception: The last transport or HTTP status error, unchanged,
                once every attempt has failed.
        """
        path = os.fspath(file_path)
        if not os.access(path, os.R_OK):
            raise FileNotReadableError(path)

        try:
            handle = open(path, "rb")
        except OSError as e:
            raise FileOpenError(path, e) from e

        with handle:
            size = os.fstat(handle.fileno()).st_size
            sink = progress or NullProgressSink()
            sink.start(kilobytes(size))

            request_headers = {"Content-Length": str(size), **(headers or {})}

            def attempt() -> httpx.Response:
                response = self.client.request(
                    "PUT",
                    url,
                    headers=request_headers,
                    content=self._stream(handle, sink),
                )
                return check_response(response)

            response = self.retry(attempt, label=path, cancel=cancel)
            sink.finish()
            return response

    def retry(
        self,
        callback: Callable[[], T],
        *,
        label: str = "upload",
        cancel: Optional[CancelToken] = None,
    ) -> T:
        """Call ``callback`` until it succeeds or attempts run out.

        Every failure waits ``retry_delay`` before the next attempt. The last
        failure is re-raised as-is.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return callback()
            except Exception as e:
                if attempt >= self.attempts:
                    raise
                logger.warning(
                    "%s: %s on attempt %d/%d, retrying in %.1fs",
                    label,
                    type(e).__name__,
                    attempt,
                    self.attempts,
                    self.retry_delay,
                )
                if self.sleeper(self.retry_delay, cancel):
                    raise UploadCancelledError() from e

    def _stream(self, handle: IO[bytes], sink: ProgressSink) -> Iterator[bytes]:
        # every attempt restarts from the first byte
        handle.seek(0)
        sent = 0
        while True:
            chunk = handle.read(self.chunk_size)
            if not chunk:
                break
            sent += len(chunk)
            yield chunk
            sink.set_progress(kilobytes(sent))

    @classmethod
    def from_config(cls, client: TransportClient, config: Any, **kwargs: Any) -> StreamingFileUploader:
        """Build from a loaded :class:`artisync.core.config.Config`."""
        settings = config.upload
        return cls(client, settings.file_attempts, settings.file_retry_delay, **kwargs)
