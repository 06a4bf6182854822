# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import retry_policies, http_statuses

    @given(policy=retry_policies)
    def test_backoff_is_bounded(policy: RetryPolicy) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

from steadycall.contracts.retry import RetryPolicy

# =============================================================================
# Retry Policy Strategies
# =============================================================================

valid_max_retries = st.integers(min_value=0, max_value=20)

# Valid delay values (positive floats, reasonable bounds)
valid_delays = st.floats(min_value=0.001, max_value=3600.0, allow_nan=False, allow_infinity=False)


@st.composite
def _retry_policies(draw: st.DrawFn) -> RetryPolicy:
    base = draw(valid_delays)
    cap = draw(st.floats(min_value=base, max_value=max(base, 7200.0), allow_nan=False, allow_infinity=False))
    return RetryPolicy(max_retries=draw(valid_max_retries), base_delay=base, max_delay=cap)


retry_policies = _retry_policies()

# 0-based attempt indices, including far past any realistic budget
attempt_indices = st.integers(min_value=0, max_value=5000)

# =============================================================================
# HTTP Strategies
# =============================================================================

http_statuses = st.integers(min_value=100, max_value=599)

# External data simulation: header values a misbehaving server might send
messy_header_values = st.one_of(
    st.text(max_size=20),
    st.integers(min_value=-(10**30), max_value=10**30).map(str),
    st.floats(allow_nan=True, allow_infinity=True).map(str),
    st.sampled_from(["", " ", "abc", "-1", "1.5", "1e3", "0x10", "Wed, 21 Oct 2015 07:28:00 GMT"]),
)
