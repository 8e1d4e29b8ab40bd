"""Bounded-concurrency request pool.

Issues a keyed set of requests over one ``httpx.AsyncClient`` with at most
``concurrency`` requests in flight. Every request resolves to a
:class:`RequestOutcome`; a failing request never cancels or delays its
siblings. Outcomes are gathered first and folded into one dict afterwards,
so no completion callback touches shared state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Hashable, Mapping

from artisync.core.client import TransportClient
from artisync.core.exceptions import validate_positive
from artisync.models.requests import RequestOutcome, UploadRequest
from artisync.uploaders.common import body_content, check_response

logger = logging.getLogger(__name__)


class BoundedRequestPool:
    """Runs keyed requests concurrently under an in-flight cap."""

    def __init__(self, client: TransportClient, concurrency: int) -> None:
        self.client = client
        self.concurrency = validate_positive(concurrency, "concurrency")

    async def run(
        self,
        method: str,
        requests: Mapping[Hashable, UploadRequest],
    ) -> dict[Hashable, RequestOutcome]:
        """Send every request and resolve each key to an outcome.

        Args:
            method: HTTP method for all requests.
            requests: Requests keyed by identity.
                Stream bodies are read with a blocking call on the event
                loop; pass bytes (see :func:`freeze_bodies`) to avoid it.

        Returns:
            One outcome per key, in input order.
        """
        if not requests:
            return {}

        semaphore = asyncio.Semaphore(self.concurrency)

        async with self.client.async_client() as http:

            async def send(key: Hashable, request: UploadRequest) -> RequestOutcome:
                async with semaphore:
                    try:
                        response = await self.client.request_async(
                            http,
                            method,
                            request.uri,
                            headers=request.headers,
                            content=body_content(request.body),
                        )
                        check_response(response)
                    except Exception as e:
                        logger.debug("%s %s failed: %s", method, request.uri, e)
                        return RequestOutcome(key=key, request=request, error=e)
                    return RequestOutcome(key=key, request=request, response=response)

            outcomes = await asyncio.gather(
                *(send(key, request) for key, request in requests.items())
            )

        return {outcome.key: outcome for outcome in outcomes}

    def run_sync(
        self,
        method: str,
        requests: Mapping[Hashable, UploadRequest],
    ) -> dict[Hashable, RequestOutcome]:
        """Blocking wrapper around :meth:`run` on a fresh event loop.

        Raises:
            RuntimeError: Called from a thread that already runs an event
                loop; await :meth:`run` there instead.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.run(method, requests))
        raise RuntimeError("run_sync() cannot be used inside a running event loop; await run()")
