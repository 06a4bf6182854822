"""Optional observability callbacks for the request executor."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

RequestStartHook = Callable[[str, str], None]
RetryHook = Callable[[int, BaseException, float], None]
ResponseHook = Callable[[int, float], None]
ErrorHook = Callable[[BaseException], None]


@dataclass(frozen=True)
class ExecutorHooks:
    """Callbacks invoked by RequestExecutor. Every hook is optional.

    Attributes:
        on_request_start: (method, url) before each physical attempt
        on_retry: (attempt, error, delay_seconds) before each inter-attempt wait;
            attempt is the 0-based index of the attempt that failed
        on_response: (status_code, elapsed_seconds) after a successful attempt
        on_error: (error) once, when the call fails terminally

    A hook that raises is logged and ignored; it never changes the outcome
    of the call.
    """

    on_request_start: RequestStartHook | None = None
    on_retry: RetryHook | None = None
    on_response: ResponseHook | None = None
    on_error: ErrorHook | None = None


NO_HOOKS = ExecutorHooks()
