"""Immutable retry policy shared by all calls of an executor.

The policy is owned by the caller and shared read-only across concurrent
calls. It is frozen, so no locking is needed.

Field Origins:
    - max_retries: RetrySettings.max_retries (direct mapping)
    - base_delay: RetrySettings.base_delay_seconds (renamed)
    - max_delay: RetrySettings.max_delay_seconds (renamed)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from steadycall.contracts.errors import ConfigurationError

if TYPE_CHECKING:
    from steadycall.core.config import RetrySettings

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 60.0


def _require_number(field_name: str, value: Any) -> float:
    # bool is an int subclass; True is not a delay
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigurationError(f"Invalid retry policy: {field_name} must be numeric, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ConfigurationError(f"Invalid retry policy: {field_name} must be finite, got {value}")
    return float(value)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry budget and backoff bounds.

    Note: max_retries counts RETRIES, not attempts. max_retries=3 means
    one initial attempt plus up to three retries (4 attempts total).
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY  # seconds
    max_delay: float = DEFAULT_MAX_DELAY  # seconds

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ConfigurationError(f"Invalid retry policy: max_retries must be an integer, got {type(self.max_retries).__name__}")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries cannot be negative")
        base = _require_number("base_delay", self.base_delay)
        cap = _require_number("max_delay", self.max_delay)
        if base <= 0:
            raise ConfigurationError(f"base_delay must be positive, got {base}")
        if cap < base:
            raise ConfigurationError(f"max_delay ({cap}) must be >= base_delay ({base})")

    @property
    def max_attempts(self) -> int:
        """Total physical attempts: the initial one plus every retry."""
        return self.max_retries + 1

    @classmethod
    def default(cls) -> RetryPolicy:
        """3 retries, 1s base delay, 60s cap."""
        return cls()

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """Single attempt, no retries."""
        return cls(max_retries=0)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        """Factory from the validated RetrySettings config model."""
        return cls(
            max_retries=settings.max_retries,
            base_delay=settings.base_delay_seconds,
            max_delay=settings.max_delay_seconds,
        )
