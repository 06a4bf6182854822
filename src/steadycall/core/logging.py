"""Structured logging for steadycall.

structlog and stdlib logging share one processor chain: stdlib records
(httpx, tenacity, anything using logging.getLogger) enter through
ProcessorFormatter's foreign_pre_chain, so both render identically.

Output goes to stderr. The CLI writes model output to stdout and the two
must not interleave.

Every record passes through:
    - merge_contextvars: stamps the active correlation id
      (see steadycall.core.correlation)
    - _mask_credentials: replaces API keys and bearer tokens with a marker
"""

import logging
import re
import sys
from collections.abc import Mapping
from typing import IO, Any

import structlog
from structlog.stdlib import ProcessorFormatter

from steadycall.contracts.errors import ConfigurationError

LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")

REDACTED = "<redacted>"

# Connection-level chatter; held at WARNING unless the root is stricter.
_QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "hpack")

# Matched against whole delimiter-separated segments: X-Auth-Token yes, X-Author no.
_CREDENTIAL_WORDS = frozenset(
    {"auth", "authorization", "apikey", "key", "secret", "token", "password", "credential", "cookie"}
)
_CREDENTIAL_NAMES = frozenset({"openai-organization", "openai-project"})
_BEARER = re.compile(r"\bBearer\s+\S+", re.IGNORECASE)


def is_credential_name(name: str) -> bool:
    """True for field or header names that carry credentials (api_key, Authorization, X-Auth-Token)."""
    lowered = name.lower()
    if lowered in _CREDENTIAL_NAMES:
        return True
    return any(segment in _CREDENTIAL_WORDS for segment in re.split(r"[^a-z0-9]+", lowered) if segment)


def redact(values: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of values with non-empty credentials replaced by REDACTED."""
    return {name: (REDACTED if value and is_credential_name(str(name)) else value) for name, value in values.items()}


def _mask_credentials(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    for key, value in redact(event_dict).items():
        if isinstance(value, Mapping):
            value = redact(value)
        elif isinstance(value, str) and _BEARER.search(value):
            value = _BEARER.sub(f"Bearer {REDACTED}", value)
        event_dict[key] = value
    return event_dict


def _renderer(json_output: bool) -> list[Any]:
    if json_output:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: IO[str] | None = None,
) -> None:
    """Install the steadycall log handler on the root logger.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        json_output: One JSON object per line instead of console text.
        level: One of DEBUG, INFO, WARNING, ERROR (case-insensitive).
        stream: Destination; defaults to the current sys.stderr.

    Raises:
        ConfigurationError: If level is not a recognised level name.
    """
    level_name = level.upper()
    if level_name not in LEVELS:
        raise ConfigurationError(f"Unknown log level {level!r}; expected one of {', '.join(LEVELS)}")
    log_level = logging.getLevelName(level_name)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        _mask_credentials,
    ]

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Loggers created before a reconfiguration must pick up the new chain
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[ProcessorFormatter.remove_processors_meta, *_renderer(json_output)],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound structlog logger for a module."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
