"""Error taxonomy for the request-execution core.

Every failure a caller can observe is a SteadyCallError carrying an
ErrorKind tag:

- TransportError: no response was obtained (DNS, connect, timeout)
- ApiError: a response arrived with a non-success status (the classified error)
- RateLimitError: an ApiError for HTTP 429 that also carries a RateLimitSnapshot
- RequestCancelledError: the caller's cancellation token fired
- ConfigurationError: a policy, setting or request failed validation
- ResponseDecodeError: a successful response body could not be decoded

Errors from lower layers stay reachable through ``__cause__``. The
``as_*``/``is_*`` helpers walk that chain so callers can ask "is this a
rate-limit failure" without string matching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from steadycall.contracts.enums import CancellationReason, ErrorKind

if TYPE_CHECKING:
    from steadycall.contracts.rate_limit import RateLimitSnapshot

E = TypeVar("E", bound=BaseException)


class SteadyCallError(Exception):
    """Base class for all steadycall errors."""

    kind: ErrorKind


class TransportError(SteadyCallError):
    """No response was obtained from the remote API.

    Always retryable. When retries are exhausted with only transport
    failures, the last one is surfaced with the executor's operation label.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}" if operation else message)


class ApiError(SteadyCallError):
    """A response was received with a non-success status.

    Immutable once constructed. Retryability is decided once, when the
    error is built from the response, and stored on the instance.

    Attributes:
        status_code: HTTP status (0 if no response was received)
        code: Stable machine-readable code (provider code or reason phrase)
        message: Human-readable message
        correlation_id: Opaque request correlation token ("" if unavailable)
        error_type: Provider error type from the body ("" if absent)
        retryable: Whether the executor may retry this outcome
        operation: Operation label of the executor that raised it
    """

    kind = ErrorKind.API

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        *,
        correlation_id: str = "",
        error_type: str = "",
        retryable: bool = False,
        operation: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.correlation_id = correlation_id
        self.error_type = error_type
        self.retryable = retryable
        self.operation = operation
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.correlation_id:
            return f"API error (status={self.status_code}, code={self.code}, correlation_id={self.correlation_id}): {self.message}"
        return f"API error (status={self.status_code}, code={self.code}): {self.message}"

    def __setattr__(self, name: str, value: object) -> None:
        # Attributes are assigned once in __init__; exception machinery
        # (__traceback__, __cause__, ...) must stay writable.
        if not name.startswith("__") and name in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        super().__setattr__(name, value)


class RateLimitError(ApiError):
    """HTTP 429 with the rate-limit state the server reported.

    Always retryable while the attempt budget remains.
    """

    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        *,
        rate_limit: RateLimitSnapshot,
        correlation_id: str = "",
        error_type: str = "",
        operation: str | None = None,
    ) -> None:
        self.rate_limit = rate_limit
        super().__init__(
            status_code,
            code,
            message,
            correlation_id=correlation_id,
            error_type=error_type,
            retryable=True,
            operation=operation,
        )

    def _describe(self) -> str:
        base = super()._describe()
        if self.rate_limit.retry_after_seconds > 0:
            return f"{base} (retry_after={self.rate_limit.retry_after_seconds:g}s)"
        return f"{base} (remaining={self.rate_limit.remaining}/{self.rate_limit.limit})"


class RequestCancelledError(SteadyCallError):
    """The caller's cancellation token fired before or during the call.

    Never retried and never wrapped further.
    """

    kind = ErrorKind.CANCELLED

    def __init__(self, reason: CancellationReason = CancellationReason.CANCELLED) -> None:
        self.reason = reason
        if reason is CancellationReason.DEADLINE_EXCEEDED:
            super().__init__("request cancelled: deadline exceeded")
        else:
            super().__init__("request cancelled")

    @property
    def deadline_exceeded(self) -> bool:
        return self.reason is CancellationReason.DEADLINE_EXCEEDED


class ConfigurationError(SteadyCallError, ValueError):
    """A policy, setting or request failed validation before any attempt."""

    kind = ErrorKind.CONFIGURATION


class RequestValidationError(ConfigurationError):
    """A provider request failed validation before it was sent."""


class ResponseDecodeError(SteadyCallError):
    """A successful response body could not be decoded."""

    kind = ErrorKind.DECODE

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}" if operation else message)


def find_error(exc: BaseException | None, error_type: type[E]) -> E | None:
    """Return the first exception of ``error_type`` in the cause chain."""
    seen: set[int] = set()
    current = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, error_type):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def as_api_error(exc: BaseException | None) -> ApiError | None:
    return find_error(exc, ApiError)


def as_rate_limit_error(exc: BaseException | None) -> RateLimitError | None:
    return find_error(exc, RateLimitError)


def is_rate_limit_error(exc: BaseException | None) -> bool:
    """True if ``exc`` is, or was caused by, a RateLimitError."""
    return as_rate_limit_error(exc) is not None


def is_cancellation(exc: BaseException | None) -> bool:
    """True if ``exc`` is, or was caused by, a RequestCancelledError."""
    return find_error(exc, RequestCancelledError) is not None
