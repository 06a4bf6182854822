"""Kinds and states used across subsystem boundaries."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Variant tag carried by every steadycall error.

    Callers branch on the kind (or the is_*/as_* helpers in
    steadycall.contracts.errors) instead of matching on message text.
    """

    TRANSPORT = "transport"
    API = "api"
    RATE_LIMIT = "rate_limit"
    CANCELLED = "cancelled"
    CONFIGURATION = "configuration"
    DECODE = "decode"


class CancellationReason(StrEnum):
    """Why a cancellation token fired."""

    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class ExecutorState(StrEnum):
    """States of one logical call inside the request executor.

    Idle -> Attempting -> (Success | Retrying | Failed); Retrying loops
    back to Attempting after the wait. Used for log context only.
    """

    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCESS = "success"
    FAILED = "failed"
