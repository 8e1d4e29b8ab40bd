"""HTTP transport shared by the upload engines.

Holds the read-only request configuration (default headers and timeouts) and
hands out httpx clients built from it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from artisync.core.config import DEFAULT_HEADERS, UploadSettings

# =============================================================================
# Constants
# =============================================================================

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_TIMEOUT = 300.0


def merge_headers(
    defaults: Mapping[str, str],
    overrides: Mapping[str, str] | None,
) -> dict[str, str]:
    """Overlay request headers on the defaults.

    Keys are compared case-insensitively; on collision the override wins and
    its spelling is kept. Non-colliding keys from both sides survive.
    """
    merged: dict[str, str] = {}
    names: dict[str, str] = {}
    for source in (defaults, overrides or {}):
        for key, value in source.items():
            previous = names.get(key.lower())
            if previous is not None:
                del merged[previous]
            names[key.lower()] = key
            merged[key] = value
    return merged


# =============================================================================
# TransportClient
# =============================================================================


@dataclass
class TransportClient:
    """Shared HTTP configuration with lazily created httpx clients.

    ``transport`` and ``async_transport`` let callers substitute httpx
    transports (for example ``httpx.MockTransport``).
    """

    default_headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    transport: httpx.BaseTransport | None = None
    async_transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    @classmethod
    def from_settings(cls, settings: UploadSettings, **kwargs: Any) -> TransportClient:
        """Build from loaded upload settings."""
        return cls(
            default_headers=dict(settings.default_headers),
            connect_timeout=settings.connect_timeout,
            timeout=settings.timeout,
            **kwargs,
        )

    # =========================================================================
    # Client Management
    # =========================================================================

    def build_timeout(self) -> httpx.Timeout:
        """Per-phase timeout with a separate connect limit.

        ``timeout`` bounds each read, write and pool wait; httpx has no limit
        on the whole request.
        """
        return httpx.Timeout(self.timeout, connect=self.connect_timeout)

    def headers_for(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        return merge_headers(self.default_headers, extra)

    def _get_client(self) -> httpx.Client:
        """Get or create the blocking HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.build_timeout(),
                verify=self.verify_ssl,
                transport=self.transport,
            )
        return self._client

    def async_client(self) -> httpx.AsyncClient:
        """Create a non-blocking client for one event loop.

        The caller owns the returned client and must close it
        (``async with client.async_client() as http: ...``).
        """
        return httpx.AsyncClient(
            timeout=self.build_timeout(),
            verify=self.verify_ssl,
            transport=self.async_transport,
        )

    def close(self) -> None:
        """Close the blocking HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> TransportClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Requests
    # =========================================================================

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | Iterable[bytes] | None = None,
    ) -> httpx.Response:
        """Blocking request with merged headers and configured timeouts."""
        return self._get_client().request(
            method,
            url,
            headers=self.headers_for(headers),
            content=content,
            timeout=self.build_timeout(),
        )

    async def request_async(
        self,
        http: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: Any = None,
    ) -> httpx.Response:
        """Non-blocking request on a client from :meth:`async_client`."""
        return await http.request(
            method,
            url,
            headers=self.headers_for(headers),
            content=content,
            timeout=self.build_timeout(),
        )
