"""Correlation identifiers threaded through a logical request.

The id lives in a ContextVar, so each thread (and each asyncio task) sees
its own value. It is also bound into structlog's contextvars so every log
line emitted inside the scope carries ``correlation_id``.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

_correlation_id: ContextVar[str] = ContextVar("steadycall_correlation_id", default="")


def generate_correlation_id() -> str:
    """New random correlation id (``corr-<uuid4 hex>``)."""
    return f"corr-{uuid.uuid4().hex}"


def get_correlation_id() -> str:
    """Correlation id of the current context, "" when none is set."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Set the correlation id for the duration of the block.

    Args:
        correlation_id: Id to use; a fresh one is generated when None

    Yields:
        The active correlation id

    Example:
        with correlation_scope() as corr_id:
            executor.execute(request)  # errors carry corr_id
    """
    value = correlation_id or generate_correlation_id()
    token = _correlation_id.set(value)
    try:
        with structlog.contextvars.bound_contextvars(correlation_id=value):
            yield value
    finally:
        _correlation_id.reset(token)
