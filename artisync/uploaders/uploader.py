"""File uploader combining the batch and single-file engines.

Both engines share one :class:`TransportClient`, so default headers and
timeouts are configured once.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from artisync.core.cancel import CancelToken, Sleeper
from artisync.core.client import TransportClient
from artisync.core.config import Config
from artisync.models.progress import ProgressSink, UploadSummary
from artisync.uploaders.batch import BatchUploadScheduler
from artisync.uploaders.common import RequestsInput
from artisync.uploaders.single import StreamingFileUploader


class FileUploader:
    """Uploads files to a remote store in bulk or one at a time."""

    def __init__(
        self,
        client: TransportClient,
        scheduler: BatchUploadScheduler,
        single: StreamingFileUploader,
    ) -> None:
        self.client = client
        self.scheduler = scheduler
        self.single = single

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        *,
        sleeper: Optional[Sleeper] = None,
        **client_kwargs: Any,
    ) -> FileUploader:
        """Build an uploader from configuration.

        Args:
            config: Loaded configuration; ``Config.load()`` when omitted.
            sleeper: Wait function shared by both engines.
            **client_kwargs: Extra TransportClient arguments (e.g. transports).
        """
        config = config or Config.load()
        client = TransportClient.from_settings(config.upload, **client_kwargs)
        return cls(
            client,
            BatchUploadScheduler.from_config(client, config, sleeper=sleeper),
            StreamingFileUploader.from_config(client, config, sleeper=sleeper),
        )

    def batch(
        self,
        method: str,
        requests: RequestsInput,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelToken] = None,
    ) -> UploadSummary:
        """Send many requests concurrently with round-based retry."""
        return self.scheduler.batch(method, requests, progress, cancel)

    def upload_file(
        self,
        file_path: Union[str, Path],
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelToken] = None,
    ) -> httpx.Response:
        """Stream one file with fixed-delay retry."""
        return self.single.upload_file(file_path, url, headers, progress, cancel)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> FileUploader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
