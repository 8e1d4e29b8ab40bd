"""Tests for artisync.core.cancel module."""

from __future__ import annotations

import threading
import time

from artisync.core.cancel import CancelToken, interruptible_sleep


class TestCancelToken:
    def test_initially_clear(self):
        assert not CancelToken().cancelled

    def test_cancel_sets_flag(self):
        token = CancelToken()
        token.cancel()

        assert token.cancelled
        assert token.wait(10) is True


class TestInterruptibleSleep:
    def test_without_token_completes(self):
        assert interruptible_sleep(0.01) is False

    def test_already_cancelled_returns_immediately(self):
        token = CancelToken()
        token.cancel()

        started = time.monotonic()
        assert interruptible_sleep(30, token) is True
        assert time.monotonic() - started < 1

    def test_zero_wait(self):
        assert interruptible_sleep(0, CancelToken()) is False

    def test_runs_to_completion_when_not_cancelled(self):
        assert interruptible_sleep(0.01, CancelToken()) is False

    def test_cancel_from_another_thread(self):
        token = CancelToken()
        timer = threading.Timer(0.05, token.cancel)
        timer.start()

        started = time.monotonic()
        try:
            assert interruptible_sleep(30, token) is True
        finally:
            timer.cancel()
        assert time.monotonic() - started < 5
