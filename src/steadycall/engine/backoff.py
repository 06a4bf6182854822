"""Exponential backoff with symmetric jitter.

delay = min(base_delay * 2**attempt, max_delay), perturbed by a uniform
draw in [-20%, +20%] of delay. Deterministic for a seeded ``rng``.
"""

from __future__ import annotations

import random

from steadycall.contracts.retry import RetryPolicy

JITTER_FRACTION = 0.2

# 2.0**1024 overflows a float; any cap is reached long before this.
_MAX_EXPONENT = 1000

_default_rng = random.Random()


def compute_backoff(attempt: int, policy: RetryPolicy, *, rng: random.Random | None = None) -> float:
    """Delay in seconds to wait after the failed attempt ``attempt`` (0-based).

    Args:
        attempt: 0-based index of the attempt that just failed; negative
            values are treated as 0
        policy: Retry policy providing base and cap
        rng: Jitter source; pass a seeded Random for reproducible delays

    Returns:
        Jittered delay, never negative
    """
    attempt = min(max(attempt, 0), _MAX_EXPONENT)
    source = rng if rng is not None else _default_rng

    delay = min(policy.base_delay * (2.0**attempt), policy.max_delay)
    jitter = source.uniform(-JITTER_FRACTION * delay, JITTER_FRACTION * delay)

    jittered = delay + jitter
    if jittered < 0:
        # Fall back to the base delay, not zero, so retries never fire in lockstep
        return policy.base_delay
    return jittered


def backoff_schedule(policy: RetryPolicy, *, rng: random.Random | None = None) -> list[float]:
    """Jittered delay for every retry slot the policy allows.

    Entry ``i`` is the wait between attempt ``i`` and attempt ``i + 1``.
    """
    return [compute_backoff(attempt, policy, rng=rng) for attempt in range(policy.max_retries)]
