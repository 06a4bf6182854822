"""Request-execution engine: backoff, classification, extraction, mapping and the retry loop."""

from steadycall.engine.backoff import backoff_schedule, compute_backoff
from steadycall.engine.classifier import is_retryable_error, is_retryable_status
from steadycall.engine.error_mapper import map_error_response, rate_limit_error_from
from steadycall.engine.executor import RequestExecutor
from steadycall.engine.hooks import ExecutorHooks
from steadycall.engine.rate_limit import extract_rate_limit

__all__ = [
    "ExecutorHooks",
    "RequestExecutor",
    "backoff_schedule",
    "compute_backoff",
    "extract_rate_limit",
    "is_retryable_error",
    "is_retryable_status",
    "map_error_response",
    "rate_limit_error_from",
]
