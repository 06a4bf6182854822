"""Request and response descriptors exchanged with the transport."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from steadycall.contracts.errors import ConfigurationError
from steadycall.contracts.rate_limit import RateLimitSnapshot


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully built request that can be sent more than once.

    A body stream cannot be replayed, so the body is either fixed bytes
    (``content``) or regenerated per attempt by ``body_factory``. The
    transport calls ``body()`` once per physical attempt.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes | None = None
    body_factory: Callable[[], bytes] | None = None

    def __post_init__(self) -> None:
        if not self.method:
            raise ConfigurationError("request method is required")
        if not self.url:
            raise ConfigurationError("request url is required")
        if self.content is not None and self.body_factory is not None:
            raise ConfigurationError("request body must be either content or body_factory, not both")

    def body(self) -> bytes | None:
        """Fresh body for one attempt (None for body-less requests)."""
        if self.body_factory is not None:
            return self.body_factory()
        return self.content

    @classmethod
    def for_json(
        cls,
        method: str,
        url: str,
        payload: Any,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        """Build a request whose JSON body is re-serialised on every attempt."""
        merged = {"Content-Type": "application/json", **(headers or {})}
        return cls(
            method=method.upper(),
            url=url,
            headers=merged,
            body_factory=lambda: json.dumps(payload, separators=(",", ":")).encode("utf-8"),
        )


@dataclass(frozen=True)
class ResponseDescriptor:
    """A response whose body has already been read and released.

    Attributes:
        status_code: HTTP status code
        headers: Case-insensitive response headers
        content: Raw body bytes
        elapsed_seconds: Round-trip time of the physical attempt
        rate_limit: Snapshot attached by the executor on success
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    elapsed_seconds: float = 0.0
    rate_limit: RateLimitSnapshot | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def request_id(self) -> str:
        """Server-assigned request id, "" when the header is absent."""
        return self.headers.get("x-request-id", "")

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            json.JSONDecodeError: If the body is not valid JSON
        """
        return json.loads(self.content)
