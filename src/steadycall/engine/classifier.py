"""Retryability classification for attempt outcomes.

Retryable (transient):
- Transport failures (no response: connect, DNS, timeout)
- Rate limits (429)
- Server errors (500, 502, 503, 504)
- Any other status >= 500

Non-retryable (permanent):
- Client errors (400, 401, 403, 404)
- Any other status < 500 (unlisted 4xx, informational, redirects)
- Cancellation and configuration errors

The ">= 500" fallback for unlisted server statuses is kept on purpose:
server-side failures lean toward retrying, client-side ones against it.
"""

from __future__ import annotations

import httpx

from steadycall.contracts.errors import (
    ApiError,
    ConfigurationError,
    RateLimitError,
    RequestCancelledError,
    TransportError,
)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
NON_RETRYABLE_STATUSES = frozenset({400, 401, 403, 404})


def is_retryable_status(status_code: int) -> bool:
    """Decide whether an HTTP status is worth another attempt."""
    if status_code in RETRYABLE_STATUSES:
        return True
    if status_code in NON_RETRYABLE_STATUSES:
        return False
    return status_code >= 500


def is_retryable_error(error: BaseException) -> bool:
    """Decide whether a failed attempt should be retried.

    ApiError carries the decision made when it was built from the response;
    it is not re-evaluated here.
    """
    if isinstance(error, (RequestCancelledError, ConfigurationError)):
        return False
    if isinstance(error, (TransportError, httpx.TransportError)):
        return True
    if isinstance(error, RateLimitError):
        return True
    if isinstance(error, ApiError):
        return error.retryable
    return False
