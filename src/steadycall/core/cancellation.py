"""Cancellation signal with an optional deadline.

A CancellationToken is created by the caller and passed to every
executor call that should share its fate. It is thread-safe: any thread
may call cancel() while another is blocked in sleep().

Example:
    token = CancellationToken(timeout=30.0)
    threading.Timer(5.0, token.cancel).start()
    executor.execute(request, token)  # raises RequestCancelledError if cancelled
"""

from __future__ import annotations

import threading
import time

from steadycall.contracts.enums import CancellationReason
from steadycall.contracts.errors import ConfigurationError, RequestCancelledError


class CancellationToken:
    """Cancellation signal raced against every inter-attempt wait."""

    def __init__(self, *, timeout: float | None = None, deadline: float | None = None) -> None:
        """Create a token.

        Args:
            timeout: Seconds from now after which the token fires
            deadline: Absolute time.monotonic() value after which the token fires

        Raises:
            ConfigurationError: If both timeout and deadline are given, or timeout is negative
        """
        if timeout is not None and deadline is not None:
            raise ConfigurationError("pass either timeout or deadline, not both")
        if timeout is not None and timeout < 0:
            raise ConfigurationError(f"timeout must be non-negative, got {timeout}")
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: CancellationReason | None = None
        self._deadline = time.monotonic() + timeout if timeout is not None else deadline

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def reason(self) -> CancellationReason | None:
        """Why the token fired, or None while it has not."""
        self._check_deadline()
        return self._reason

    @property
    def cancelled(self) -> bool:
        self._check_deadline()
        return self._event.is_set()

    def cancel(self, reason: CancellationReason = CancellationReason.CANCELLED) -> None:
        """Fire the token. Only the first reason is kept."""
        with self._lock:
            if self._reason is None:
                self._reason = reason
            self._event.set()

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Raise RequestCancelledError if the token has fired."""
        if self.cancelled:
            raise RequestCancelledError(self._reason or CancellationReason.CANCELLED)

    def sleep(self, seconds: float) -> None:
        """Wait ``seconds`` unless the token fires first.

        Whichever of the timer and the token fires first wins. A token that
        is set when the timer expires still wins: the caller gets a
        cancellation, never a silent wake-up.

        Raises:
            RequestCancelledError: If the token fired before or during the wait
        """
        self.raise_if_cancelled()
        wait_for = max(0.0, seconds)
        remaining = self.remaining()
        bounded_by_deadline = remaining is not None and remaining <= wait_for
        if bounded_by_deadline:
            wait_for = remaining
        self._event.wait(wait_for)
        if bounded_by_deadline:
            self.cancel(CancellationReason.DEADLINE_EXCEEDED)
        self.raise_if_cancelled()

    def _check_deadline(self) -> None:
        if self._deadline is not None and not self._event.is_set() and time.monotonic() >= self._deadline:
            self.cancel(CancellationReason.DEADLINE_EXCEEDED)
