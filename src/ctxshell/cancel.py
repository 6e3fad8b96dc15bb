"""Cooperative cancellation scopes for command invocations and background tasks."""

from __future__ import annotations

import threading
import time
from datetime import timedelta

from .errors import OperationCancelled


class CancelScope:
    """A cancellation token, optionally bounded by a deadline.

    A scope is cancelled explicitly via :meth:`cancel` or implicitly once its
    deadline passes. Work observes it by polling :attr:`cancelled`, calling
    :meth:`raise_if_cancelled`, or sleeping through :meth:`wait`.
    """

    def __init__(self, timeout: timedelta | float | None = None) -> None:
        self._event = threading.Event()
        self._deadline: float | None = None
        self._reason = ""
        if timeout is not None:
            seconds = timeout.total_seconds() if isinstance(timeout, timedelta) else float(timeout)
            self._deadline = time.monotonic() + max(seconds, 0.0)

    @property
    def deadline(self) -> float | None:
        """Monotonic-clock deadline, if one was set."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return whether cancelled."""
        end = None if timeout is None else time.monotonic() + timeout
        while not self.cancelled:
            limits = [t for t in (end, self._deadline) if t is not None]
            if not limits:
                self._event.wait()
                continue
            remaining = min(limits) - time.monotonic()
            if remaining <= 0:
                break
            self._event.wait(remaining)
        return self.cancelled

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled(self._reason or "cancelled")
