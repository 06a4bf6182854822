"""Rate-limit header extraction.

Recognised headers (case-insensitive, all optional):
- X-RateLimit-Limit: requests per window
- X-RateLimit-Remaining: requests left in the window
- X-RateLimit-Reset: window reset as Unix seconds
- Retry-After: seconds to wait before retrying

Missing, malformed or non-text values leave the field at zero; extraction
never fails.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta

import httpx

from steadycall.contracts.rate_limit import RateLimitSnapshot

LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"
RETRY_AFTER_HEADER = "Retry-After"

_NON_NEGATIVE_INT = re.compile(r"\d+", re.ASCII)


def _parse_count(raw: object) -> int | None:
    # Plain mappings may carry ints, bytes or None; only text is a header value
    if not isinstance(raw, str):
        return None
    value = raw.strip()
    if not _NON_NEGATIVE_INT.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        # Beyond the interpreter's int-from-string digit limit
        return None


def _parse_reset(raw: object) -> datetime | None:
    seconds = _parse_count(raw)
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_retry_after(raw: object) -> timedelta:
    seconds = _parse_count(raw)
    if seconds is None:
        return timedelta(0)
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        return timedelta(0)


def extract_rate_limit(headers: Mapping[str, object] | None) -> RateLimitSnapshot:
    """Build a RateLimitSnapshot from response headers.

    Args:
        headers: Response headers (any mapping; lookups are case-insensitive)

    Returns:
        Snapshot with unparseable or absent fields left at zero
    """
    if not headers:
        return RateLimitSnapshot()
    if isinstance(headers, httpx.Headers):
        lookup: Mapping[str, object] = headers
    else:
        # Plain mappings may hold values httpx.Headers would refuse to encode
        lookup = {str(name).lower(): value for name, value in headers.items()}

    return RateLimitSnapshot(
        limit=_parse_count(lookup.get(LIMIT_HEADER.lower())) or 0,
        remaining=_parse_count(lookup.get(REMAINING_HEADER.lower())) or 0,
        reset_at=_parse_reset(lookup.get(RESET_HEADER.lower())),
        retry_after=_parse_retry_after(lookup.get(RETRY_AFTER_HEADER.lower())),
    )
