# tests/property/engine/test_backoff_properties.py
"""Property-based tests for backoff computation and retry policies.

Properties tested:
1. Every delay lies within 20% of min(base * 2**attempt, max_delay)
2. Delays are never negative and never exceed 1.2 * max_delay
3. A seeded rng gives reproducible delays
4. The schedule has exactly max_retries entries
5. Invalid policies are rejected
"""

from __future__ import annotations

import random

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from steadycall.contracts.errors import ConfigurationError
from steadycall.contracts.retry import RetryPolicy
from steadycall.engine.backoff import JITTER_FRACTION, backoff_schedule, compute_backoff
from tests.property.conftest import attempt_indices, retry_policies, valid_delays, valid_max_retries

# Float rounding in base * 2**attempt and the jitter draw
EPSILON = 1e-9


class TestComputeBackoffProperties:
    @given(policy=retry_policies, attempt=attempt_indices, seed=st.integers())
    @settings(max_examples=300)
    def test_delay_within_jitter_band(self, policy: RetryPolicy, attempt: int, seed: int) -> None:
        """Property: delay in [0.8 * d, 1.2 * d] where d = min(base * 2**attempt, max)."""
        delay = compute_backoff(attempt, policy, rng=random.Random(seed))

        center = min(policy.base_delay * 2.0 ** min(attempt, 1000), policy.max_delay)
        low = center * (1 - JITTER_FRACTION)
        high = center * (1 + JITTER_FRACTION)
        tolerance = EPSILON * max(1.0, center)
        assert low - tolerance <= delay <= high + tolerance

    @given(policy=retry_policies, attempt=st.integers(min_value=-10**6, max_value=10**6), seed=st.integers())
    def test_delay_never_negative_and_bounded(self, policy: RetryPolicy, attempt: int, seed: int) -> None:
        """Property: any attempt index (even negative) gives 0 <= delay <= 1.2 * max."""
        delay = compute_backoff(attempt, policy, rng=random.Random(seed))

        assert delay >= 0
        assert delay <= policy.max_delay * (1 + JITTER_FRACTION) + EPSILON * max(1.0, policy.max_delay)

    @given(policy=retry_policies, attempt=attempt_indices, seed=st.integers())
    def test_seeded_rng_is_deterministic(self, policy: RetryPolicy, attempt: int, seed: int) -> None:
        """Property: same seed, same delay."""
        first = compute_backoff(attempt, policy, rng=random.Random(seed))
        second = compute_backoff(attempt, policy, rng=random.Random(seed))

        assert first == second

    @given(policy=retry_policies, attempt=st.integers(min_value=0, max_value=60))
    def test_center_is_non_decreasing(self, policy: RetryPolicy, attempt: int) -> None:
        """Property: with jitter pinned to zero the delay never shrinks as attempts grow."""

        class _NoJitter(random.Random):
            def uniform(self, a: float, b: float) -> float:
                return 0.0

        rng = _NoJitter()
        assert compute_backoff(attempt, policy, rng=rng) <= compute_backoff(attempt + 1, policy, rng=rng)


class TestBackoffScheduleProperties:
    @given(policy=retry_policies, seed=st.integers())
    def test_schedule_length_matches_retries(self, policy: RetryPolicy, seed: int) -> None:
        """Property: one wait per retry slot, none for the final attempt."""
        schedule = backoff_schedule(policy, rng=random.Random(seed))

        assert len(schedule) == policy.max_retries
        assert len(schedule) == policy.max_attempts - 1


class TestRetryPolicyProperties:
    @given(max_retries=valid_max_retries, base=valid_delays, extra=st.floats(min_value=0.0, max_value=1000.0))
    def test_valid_policies_accepted(self, max_retries: int, base: float, extra: float) -> None:
        """Property: any base > 0 and max >= base is accepted."""
        policy = RetryPolicy(max_retries=max_retries, base_delay=base, max_delay=base + extra)

        assert policy.max_attempts == max_retries + 1

    @given(max_retries=st.integers(max_value=-1))
    @settings(max_examples=50)
    def test_negative_retries_rejected(self, max_retries: int) -> None:
        with pytest.raises(ConfigurationError, match="max_retries cannot be negative"):
            RetryPolicy(max_retries=max_retries)

    @given(base=valid_delays, cap=valid_delays)
    def test_cap_below_base_rejected(self, base: float, cap: float) -> None:
        assume(cap < base)

        with pytest.raises(ConfigurationError):
            RetryPolicy(base_delay=base, max_delay=cap)

    @given(base=st.floats(max_value=0.0, allow_nan=False, allow_infinity=False))
    @settings(max_examples=50)
    def test_non_positive_base_rejected(self, base: float) -> None:
        with pytest.raises(ConfigurationError):
            RetryPolicy(base_delay=base)
