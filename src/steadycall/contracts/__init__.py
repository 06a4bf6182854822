"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes (RetrySettings, ClientSettings) are NOT re-exported here -
import them from steadycall.core.config.

Import patterns:
    # Contracts (lightweight)
    from steadycall.contracts import RetryPolicy, ApiError, RateLimitSnapshot

    # Settings classes
    from steadycall.core.config import ClientSettings
"""

from steadycall.contracts.enums import CancellationReason, ErrorKind, ExecutorState
from steadycall.contracts.errors import (
    ApiError,
    ConfigurationError,
    RateLimitError,
    RequestCancelledError,
    RequestValidationError,
    ResponseDecodeError,
    SteadyCallError,
    TransportError,
    as_api_error,
    as_rate_limit_error,
    find_error,
    is_cancellation,
    is_rate_limit_error,
)
from steadycall.contracts.http import RequestDescriptor, ResponseDescriptor
from steadycall.contracts.rate_limit import RateLimitSnapshot
from steadycall.contracts.retry import RetryPolicy

__all__ = [
    "ApiError",
    "CancellationReason",
    "ConfigurationError",
    "ErrorKind",
    "ExecutorState",
    "RateLimitError",
    "RateLimitSnapshot",
    "RequestCancelledError",
    "RequestDescriptor",
    "RequestValidationError",
    "ResponseDecodeError",
    "ResponseDescriptor",
    "RetryPolicy",
    "SteadyCallError",
    "TransportError",
    "as_api_error",
    "as_rate_limit_error",
    "find_error",
    "is_cancellation",
    "is_rate_limit_error",
]
