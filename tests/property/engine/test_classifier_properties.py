# tests/property/engine/test_classifier_properties.py
"""Property-based tests for classification, error mapping and header extraction.

Properties tested:
1. Retryability of a status depends only on the status
2. The mapper never raises and always agrees with the classifier
3. 429 is always retryable, the listed client errors never are
4. Header extraction never raises and never yields negative values
"""

from __future__ import annotations

from datetime import timedelta

from hypothesis import given
from hypothesis import strategies as st

from steadycall.engine.classifier import (
    NON_RETRYABLE_STATUSES,
    RETRYABLE_STATUSES,
    is_retryable_error,
    is_retryable_status,
)
from steadycall.engine.error_mapper import map_error_response
from steadycall.engine.rate_limit import extract_rate_limit
from tests.property.conftest import http_statuses, messy_header_values

error_bodies = st.one_of(
    st.none(),
    st.binary(max_size=64),
    st.text(max_size=64),
    st.builds(
        lambda code, message: f'{{"error": {{"code": {code}, "message": {message}}}}}',
        st.sampled_from(['"x"', "1", "null", "[]", "{}", '""']),
        st.sampled_from(['"msg"', "2.5", "null", "true", '""']),
    ),
)


class TestClassifierProperties:
    @given(status=http_statuses)
    def test_retryable_iff_listed_or_server_error(self, status: int) -> None:
        """Property: listed transient statuses and unlisted >= 500 retry; nothing else does."""
        expected = status in RETRYABLE_STATUSES or (status not in NON_RETRYABLE_STATUSES and status >= 500)

        assert is_retryable_status(status) is expected

    @given(status=http_statuses, body=error_bodies)
    def test_mapper_never_raises_and_agrees_with_classifier(self, status: int, body: bytes | str | None) -> None:
        error = map_error_response(status, body)

        assert error.status_code == status
        assert error.code
        assert error.message
        assert error.retryable is is_retryable_status(status)
        assert is_retryable_error(error) is error.retryable

    @given(body=error_bodies)
    def test_429_always_retryable(self, body: bytes | str | None) -> None:
        assert map_error_response(429, body).retryable is True

    @given(status=st.sampled_from(sorted(NON_RETRYABLE_STATUSES)), body=error_bodies)
    def test_listed_client_errors_never_retryable(self, status: int, body: bytes | str | None) -> None:
        assert map_error_response(status, body).retryable is False


class TestRateLimitExtractionProperties:
    @given(
        limit=messy_header_values,
        remaining=messy_header_values,
        reset=messy_header_values,
        retry_after=messy_header_values,
    )
    def test_extraction_never_raises(self, limit: str, remaining: str, reset: str, retry_after: str) -> None:
        snapshot = extract_rate_limit(
            {
                "X-RateLimit-Limit": limit,
                "X-RateLimit-Remaining": remaining,
                "X-RateLimit-Reset": reset,
                "Retry-After": retry_after,
            }
        )

        assert snapshot.limit >= 0
        assert snapshot.remaining >= 0
        assert snapshot.retry_after >= timedelta(0)

    @given(seconds=st.integers(min_value=0, max_value=10**6))
    def test_well_formed_retry_after_round_trips(self, seconds: int) -> None:
        assert extract_rate_limit({"Retry-After": str(seconds)}).retry_after_seconds == seconds
