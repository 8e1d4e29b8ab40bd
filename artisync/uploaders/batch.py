"""Batch upload scheduler with exponential backoff.

The scheduler runs the pending requests through a :class:`BoundedRequestPool`
in rounds. After each round only the failed requests are kept, keyed as
before. While attempts remain the scheduler waits
``min(base_delay * 2 ** (max_retries - attempts_remaining), max_delay)`` and
runs another round; when they run out a :class:`BatchUploadError` reports how
many requests were still failing.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Hashable
from typing import Any, Optional

from artisync.core.cancel import CancelToken, Sleeper, interruptible_sleep
from artisync.core.client import TransportClient
from artisync.core.exceptions import BatchUploadError, UploadCancelledError, ValidationError
from artisync.core.logging import log_context
from artisync.models.progress import NullProgressSink, ProgressPolicy, ProgressSink, UploadSummary
from artisync.models.requests import RequestOutcome, RetryRound, UploadRequest
from artisync.uploaders.common import RequestsInput, backoff_delay, freeze_bodies, key_requests
from artisync.uploaders.constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_UPLOAD_CONCURRENCY,
)
from artisync.uploaders.pool import BoundedRequestPool

logger = logging.getLogger(__name__)


class _RoundProgress:
    """Applies a ProgressPolicy to the caller's sink."""

    def __init__(self, sink: ProgressSink, policy: ProgressPolicy, total: int) -> None:
        self.sink = sink
        self.policy = policy
        self.total = total
        self.advanced = 0

    def begin(self) -> None:
        self.sink.start(self.total)

    def begin_round(self, retry_round: RetryRound) -> None:
        # the first round was already started with the full total
        if self.policy is ProgressPolicy.REBASE and retry_round.number > 1:
            self.sink.start(retry_round.size)

    def record_success(self) -> None:
        if self.policy is ProgressPolicy.CAP and self.advanced >= self.total:
            return
        self.advanced += 1
        self.sink.advance()


class BatchUploadScheduler:
    """Uploads a keyed request set with round-based retries."""

    def __init__(
        self,
        client: TransportClient,
        concurrency: int = DEFAULT_UPLOAD_CONCURRENCY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        *,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        progress_policy: ProgressPolicy = ProgressPolicy.CAP,
        sleeper: Optional[Sleeper] = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            client: Shared transport configuration.
            concurrency: Maximum requests in flight.
            max_retries: Retry rounds allowed after the first round.
            base_delay: Backoff before the first retry round, seconds.
            max_delay: Upper bound for any backoff wait, seconds.
            progress_policy: How progress is reported across rounds.
            sleeper: Wait function, ``(seconds, cancel) -> cancelled``.

        Raises:
            ValidationError: If concurrency < 1 or max_retries < 0.
        """
        if max_retries < 0:
            raise ValidationError("max_retries cannot be negative", field="max_retries", value=max_retries)
        self.client = client
        self.pool = BoundedRequestPool(client, concurrency)
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.progress_policy = progress_policy
        self.sleeper: Sleeper = sleeper or interruptible_sleep
        self.last_summary = UploadSummary()

    @property
    def concurrency(self) -> int:
        return self.pool.concurrency

    def delay_for(self, retry_round: RetryRound) -> float:
        """Backoff to wait after ``retry_round`` fails."""
        return backoff_delay(
            self.max_retries,
            retry_round.attempts_remaining,
            base_delay=retry_round.base_delay,
            max_delay=self.max_delay,
        )

    def batch(
        self,
        method: str,
        requests: RequestsInput,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelToken] = None,
    ) -> UploadSummary:
        """Send all requests, retrying failures in backoff-separated rounds.

        Args:
            method: HTTP method (usually PUT).
            requests: Mapping of key to request, or requests keyed by
                ``request.key``.
            progress: Optional sink; started with the request count.
            cancel: Optional token that aborts a backoff wait.

        Returns:
            Summary of the rounds that ran.

        Raises:
            BatchUploadError: Requests still failed after the last round.
            UploadCancelledError: ``cancel`` fired during a backoff wait.
            RuntimeError: Called from a running event loop (rounds run
                through :func:`asyncio.run`).
        """
        pending = freeze_bodies(key_requests(requests))
        tracker = _RoundProgress(progress or NullProgressSink(), self.progress_policy, len(pending))
        summary = UploadSummary(total=len(pending), method=method)
        self.last_summary = summary
        started = time.monotonic()

        tracker.begin()
        retry_round = RetryRound(
            pending=pending,
            attempts_remaining=self.max_retries,
            base_delay=self.base_delay,
        )

        with log_context("batch_upload", logger, method=method, requests=len(pending)) as ctx:
            while retry_round.pending:
                tracker.begin_round(retry_round)
                summary.rounds += 1
                summary.round_sizes.append(retry_round.size)

                outcomes = self.pool.run_sync(method, retry_round.pending)
                failed = self._fold(outcomes, tracker, summary)
                summary.last_round_failed = len(failed)
                summary.duration = time.monotonic() - started

                if not failed:
                    break

                if retry_round.attempts_remaining <= 0:
                    reasons = {key: outcomes[key].reason for key in failed}
                    summary.failed = len(failed)
                    summary.errors = [f"{key}: {reason}" for key, reason in reasons.items()]
                    raise BatchUploadError(len(failed), self.max_retries, list(failed), reasons)

                delay = self.delay_for(retry_round)
                summary.delays.append(delay)
                ctx.warning(
                    "round %d: %d of %d requests failed, retrying in %.1fs (%d attempts left)",
                    retry_round.number,
                    len(failed),
                    retry_round.size,
                    delay,
                    retry_round.attempts_remaining,
                )
                if self.sleeper(delay, cancel):
                    summary.cancelled = True
                    summary.failed = len(failed)
                    raise UploadCancelledError(len(failed))

                retry_round = retry_round.next(failed)

        summary.duration = time.monotonic() - started
        tracker.sink.finish()
        return summary

    @staticmethod
    def _fold(
        outcomes: dict[Hashable, RequestOutcome],
        tracker: _RoundProgress,
        summary: UploadSummary,
    ) -> dict[Hashable, UploadRequest]:
        """Split a settled round into progress updates and the failed set."""
        failed: dict[Hashable, UploadRequest] = {}
        for key, outcome in outcomes.items():
            if outcome.succeeded:
                summary.succeeded += 1
                tracker.record_success()
            else:
                failed[key] = outcome.request
        return failed

    @classmethod
    def from_config(cls, client: TransportClient, config: Any, **kwargs: Any) -> BatchUploadScheduler:
        """Build from a loaded :class:`artisync.core.config.Config`."""
        settings = config.upload
        return cls(
            client,
            settings.concurrency,
            settings.max_retries,
            base_delay=settings.base_delay,
            max_delay=settings.max_delay,
            progress_policy=ProgressPolicy.from_string(settings.progress_policy),
            **kwargs,
        )
