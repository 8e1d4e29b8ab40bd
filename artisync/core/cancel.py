"""Cancellable waits for retry backoff.

Without a token a wait is a plain blocking sleep. With a token, another
thread can call :meth:`CancelToken.cancel` to end the wait early.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CancelToken:
    """Thread-safe flag that interrupts backoff waits."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation; wakes any wait in progress."""
        self._event.set()

    def wait(self, seconds: float) -> bool:
        """Block up to ``seconds``. Returns True if cancelled."""
        return self._event.wait(seconds)


Sleeper = Callable[[float, Optional[CancelToken]], bool]


def interruptible_sleep(seconds: float, cancel: Optional[CancelToken] = None) -> bool:
    """Sleep for ``seconds`` unless ``cancel`` fires first.

    Returns:
        True if the wait was cancelled, False if it ran to completion.
    """
    if cancel is None:
        if seconds > 0:
            time.sleep(seconds)
        return False
    if cancel.cancelled:
        return True
    if seconds <= 0:
        return False
    return cancel.wait(seconds)
