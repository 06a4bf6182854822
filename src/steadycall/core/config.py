"""
Configuration schema and loading for steadycall clients.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction; the runtime
RetryPolicy is derived from them once and shared read-only.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

from steadycall.contracts.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
API_KEY_ENV_VAR = "OPENAI_API_KEY"
BASE_URL_ENV_VAR = "OPENAI_BASE_URL"

MISSING_API_KEY_MESSAGE = (
    f"API key required; set {API_KEY_ENV_VAR} environment variable or provide via ClientSettings.api_key"
)


class RetrySettings(BaseModel):
    """Retry behavior configuration.

    Example YAML:
        retry:
          max_retries: 5
          base_delay_seconds: 0.5
          max_delay_seconds: 30
    """

    model_config = {"frozen": True}

    max_retries: int = Field(default=3, ge=0, description="Maximum retries after the initial attempt")
    base_delay_seconds: float = Field(default=1.0, gt=0, description="Initial backoff delay")
    max_delay_seconds: float = Field(default=60.0, gt=0, description="Maximum backoff delay")

    @model_validator(mode="after")
    def validate_delay_bounds(self) -> "RetrySettings":
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError(
                f"max_delay_seconds ({self.max_delay_seconds}) must be >= base_delay_seconds ({self.base_delay_seconds})"
            )
        return self


class LoggingSettings(BaseModel):
    """Log output configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=False, description="Render logs as JSON instead of console text")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class ClientSettings(BaseModel):
    """Top-level client configuration.

    Example YAML:
        api_key: ${OPENAI_API_KEY}
        base_url: https://api.openai.com/v1
        timeout_seconds: 60
        retry:
          max_retries: 3
        logging:
          level: INFO
    """

    model_config = {"frozen": True}

    api_key: SecretStr = Field(description="Provider API key")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Provider API base URL")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Per-attempt HTTP timeout")
    retry: RetrySettings = Field(default_factory=RetrySettings, description="Retry behavior configuration")
    logging: LoggingSettings = Field(default_factory=LoggingSettings, description="Log output configuration")

    @field_validator("api_key")
    @classmethod
    def validate_api_key_present(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError(MISSING_API_KEY_MESSAGE)
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("base_url cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {v!r}")
        return v.rstrip("/")


# Dynaconf bookkeeping entries returned by as_dict()
_DYNACONF_KEYS = frozenset({"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"})

# ${NAME} or ${NAME:-fallback}; NAME follows shell conventions
_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Z_][A-Z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def _substitute(match: re.Match[str]) -> str:
    value = os.environ.get(match["name"])
    if value is not None:
        return value
    if match["fallback"] is not None:
        return match["fallback"]
    # Left verbatim so validation errors show which variable was missing
    return match.group(0)


def _normalize(value: Any) -> Any:
    """Lowercase mapping keys and expand ${VAR} placeholders, recursively.

    Dynaconf hands back uppercase keys at every level, while the pydantic
    fields are lowercase. Placeholders are expanded only in values.
    """
    if isinstance(value, str):
        return _PLACEHOLDER.sub(_substitute, value)
    if isinstance(value, dict):
        return {str(key).lower(): _normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


def load_settings(config_path: Path) -> ClientSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (STEADYCALL_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: STEADYCALL_RETRY__MAX_RETRIES for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated ClientSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="STEADYCALL",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    raw = {key: value for key, value in dynaconf_settings.as_dict().items() if key not in _DYNACONF_KEYS}
    return ClientSettings(**_normalize(raw))


def settings_from_env() -> ClientSettings:
    """Default settings with the API key (and base URL) taken from the environment.

    Raises:
        ConfigurationError: If OPENAI_API_KEY is unset or empty
    """
    api_key = os.environ.get(API_KEY_ENV_VAR, "")
    if not api_key.strip():
        raise ConfigurationError(MISSING_API_KEY_MESSAGE)
    overrides: dict[str, Any] = {"api_key": api_key}
    base_url = os.environ.get(BASE_URL_ENV_VAR)
    if base_url:
        overrides["base_url"] = base_url
    return ClientSettings(**overrides)
