"""Rate-limit state reported by the remote API."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True)
class RateLimitSnapshot:
    """Rate-limit state parsed from one response's headers.

    Derived fresh from each response and never mutated. Fields the server
    did not send (or sent malformed) stay at their zero value.

    Attributes:
        limit: Requests allowed per window (X-RateLimit-Limit)
        remaining: Requests left in the current window (X-RateLimit-Remaining)
        reset_at: When the window resets, UTC (X-RateLimit-Reset), or None
        retry_after: Server-requested wait before retrying (Retry-After);
            only meaningful on throttling responses
    """

    limit: int = 0
    remaining: int = 0
    reset_at: datetime | None = None
    retry_after: timedelta = timedelta(0)

    @property
    def retry_after_seconds(self) -> float:
        """Retry-After hint in seconds (0.0 when absent)."""
        return self.retry_after.total_seconds()

    @property
    def is_empty(self) -> bool:
        """True when the response carried no usable rate-limit headers."""
        return self.limit == 0 and self.remaining == 0 and self.reset_at is None and self.retry_after == timedelta(0)
