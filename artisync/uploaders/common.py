"""Common utilities for uploader modules."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from dataclasses import replace
from typing import Union

import httpx

from artisync.core.exceptions import ValidationError
from artisync.models.requests import RequestBody, UploadRequest
from artisync.uploaders.constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    FAILURE_STATUS_THRESHOLD,
)

RequestsInput = Union[Mapping[Hashable, UploadRequest], Iterable[UploadRequest]]


def backoff_delay(
    max_retries: int,
    attempts_remaining: int,
    *,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> float:
    """Wait before the next batch round.

    ``base_delay * 2 ** (max_retries - attempts_remaining)`` capped at
    ``max_delay``: 1, 2, 4, 8, 16, 16... with the defaults.
    """
    exponent = max(0, max_retries - attempts_remaining)
    return min(base_delay * (2**exponent), max_delay)


def is_failure_status(status_code: int) -> bool:
    """Client and server errors both count as failed uploads."""
    return status_code >= FAILURE_STATUS_THRESHOLD


def check_response(response: httpx.Response) -> httpx.Response:
    """Raise ``httpx.HTTPStatusError`` for 4xx/5xx responses."""
    if is_failure_status(response.status_code):
        response.raise_for_status()
    return response


def body_content(body: RequestBody | None) -> bytes | None:
    """Materialize a request body so every attempt sends the same bytes.

    File-like bodies are rewound before reading when they support seeking.
    """
    if body is None or isinstance(body, bytes):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    if body.seekable():
        body.seek(0)
    return body.read()


def freeze_bodies(requests: Mapping[Hashable, UploadRequest]) -> dict[Hashable, UploadRequest]:
    """Replace stream bodies with their bytes, read once.

    Retry rounds then resend exactly what the first round sent, even for
    streams that cannot be rewound.
    """
    frozen: dict[Hashable, UploadRequest] = {}
    for key, request in requests.items():
        if request.body is None or isinstance(request.body, bytes):
            frozen[key] = request
        else:
            frozen[key] = replace(request, body=body_content(request.body))
    return frozen


def key_requests(requests: RequestsInput) -> dict[Hashable, UploadRequest]:
    """Index requests by key.

    A mapping is taken as-is (its keys win over ``request.key``); an iterable
    is keyed by each request's own ``key``.

    Raises:
        ValidationError: If two requests in an iterable share a key.
    """
    if isinstance(requests, Mapping):
        return dict(requests)

    keyed: dict[Hashable, UploadRequest] = {}
    for request in requests:
        if request.key in keyed:
            raise ValidationError("Duplicate upload request key", field="key", value=request.key)
        keyed[request.key] = request
    return keyed
