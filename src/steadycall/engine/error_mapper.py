"""Map failed responses to classified errors.

Expected error body (every part optional):

    {"error": {"code": "...", "message": "...", "type": "..."}}

Anything missing, empty or unparseable degrades to the status's reason
phrase and a generic message. The mapper never raises.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from steadycall.contracts.errors import ApiError, RateLimitError
from steadycall.contracts.rate_limit import RateLimitSnapshot
from steadycall.engine.classifier import is_retryable_status

UNKNOWN_CODE = "unknown"


def _parse_error_body(body: bytes | str | None) -> dict[str, Any]:
    """Return the nested ``error`` object, or {} if the body has none."""
    if not body:
        return {}
    try:
        parsed = json.loads(body)
    except (ValueError, TypeError, RecursionError):
        # ValueError covers JSONDecodeError and undecodable bytes;
        # RecursionError comes from pathologically nested documents
        return {}
    if not isinstance(parsed, dict):
        return {}
    error = parsed.get("error")
    return error if isinstance(error, dict) else {}


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def fallback_code(status_code: int) -> str:
    """Reason phrase for ``status_code`` ("unknown" for unregistered codes)."""
    return httpx.codes.get_reason_phrase(status_code) or UNKNOWN_CODE


def fallback_message(status_code: int) -> str:
    phrase = httpx.codes.get_reason_phrase(status_code)
    return f"request failed with status {status_code} {phrase}".rstrip()


def map_error_response(
    status_code: int,
    body: bytes | str | None,
    *,
    correlation_id: str = "",
    operation: str | None = None,
) -> ApiError:
    """Build the classified error for a non-success response.

    Args:
        status_code: HTTP status of the response
        body: Raw response body (may be empty or not JSON)
        correlation_id: Correlation token for the logical request
        operation: Label of the executor operation that received it

    Returns:
        ApiError with retryability decided by the classifier
    """
    details = _parse_error_body(body)
    code = _as_text(details.get("code")) or fallback_code(status_code)
    message = _as_text(details.get("message")) or fallback_message(status_code)

    return ApiError(
        status_code,
        code,
        message,
        correlation_id=correlation_id,
        error_type=_as_text(details.get("type")),
        retryable=is_retryable_status(status_code),
        operation=operation,
    )


def rate_limit_error_from(error: ApiError, rate_limit: RateLimitSnapshot) -> RateLimitError:
    """Promote a throttling ApiError to a RateLimitError carrying ``rate_limit``."""
    return RateLimitError(
        error.status_code,
        error.code,
        error.message,
        rate_limit=rate_limit,
        correlation_id=error.correlation_id,
        error_type=error.error_type,
        operation=error.operation,
    )
