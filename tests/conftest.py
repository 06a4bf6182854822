# tests/conftest.py
"""Shared test fixtures and helpers.

Hypothesis profiles: ci (100 examples, default), nightly (1000), debug
(10, verbose). Select one with HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import logging
import os
import random
from collections.abc import Iterator

import pytest
import structlog
from hypothesis import Verbosity, settings

from steadycall.contracts.retry import RetryPolicy
from steadycall.core.config import API_KEY_ENV_VAR, BASE_URL_ENV_VAR


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Policy with millisecond delays for tests that use real sleeps."""
    return RetryPolicy(max_retries=3, base_delay=0.001, max_delay=0.01)


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove provider env vars so tests never pick up a developer's key.

    Each var is set before being deleted so monkeypatch also undoes values
    a test loads later (e.g. from a .env file).
    """
    for name in (API_KEY_ENV_VAR, BASE_URL_ENV_VAR):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    for name in list(os.environ):
        if name.startswith("STEADYCALL_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Iterator[None]:
    """Undo configure_logging and context bindings made by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


# Hypothesis profiles, chosen with HYPOTHESIS_PROFILE (default "ci").
# Deadlines are off in every profile.
_PROFILE_EXAMPLES = {"ci": 100, "nightly": 1000, "debug": 10}

for _name, _examples in _PROFILE_EXAMPLES.items():
    settings.register_profile(
        _name,
        max_examples=_examples,
        deadline=None,
        verbosity=Verbosity.verbose if _name == "debug" else Verbosity.normal,
    )

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
