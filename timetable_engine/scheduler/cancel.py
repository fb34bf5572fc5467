from __future__ import annotations

import threading
import time

from ..errors import Cancelled


class CancelToken:
    """Caller-held abort switch, optionally with a deadline.

    Safe to cancel from another thread; the solver polls it at every slot.
    """

    def __init__(self, timeout_sec: float | None = None):
        self._event = threading.Event()
        self.deadline = None if timeout_sec is None else time.monotonic() + timeout_sec

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise Cancelled("cancelled by caller")
        if self.expired:
            raise Cancelled("timeout exceeded")
