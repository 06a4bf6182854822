"""Core infrastructure: configuration, logging, cancellation and correlation."""

from steadycall.core.cancellation import CancellationToken
from steadycall.core.config import (
    ClientSettings,
    LoggingSettings,
    RetrySettings,
    load_settings,
    settings_from_env,
)
from steadycall.core.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
)
from steadycall.core.logging import configure_logging, get_logger

__all__ = [
    "CancellationToken",
    "ClientSettings",
    "LoggingSettings",
    "RetrySettings",
    "configure_logging",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger",
    "load_settings",
    "settings_from_env",
]
