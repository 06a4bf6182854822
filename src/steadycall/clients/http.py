"""HTTP transport over a pooled httpx.Client.

Performs exactly one exchange per send(): no retries, no redirects
followed, the body rebuilt from the RequestDescriptor each time and the
response fully read and closed before it is handed back.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from types import TracebackType

import httpx
import structlog

from steadycall.contracts.enums import CancellationReason
from steadycall.contracts.errors import RequestCancelledError, TransportError
from steadycall.contracts.http import RequestDescriptor, ResponseDescriptor
from steadycall.core.cancellation import CancellationToken
from steadycall.core.logging import redact

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 60.0

# Connection pool sizing for a single provider host.
DEFAULT_LIMITS = httpx.Limits(
    max_connections=100,
    max_keepalive_connections=10,
    keepalive_expiry=90.0,
)


class HttpxTransport:
    """Transport that sends RequestDescriptors with httpx.

    Example:
        with HttpxTransport(base_url="https://api.openai.com/v1", timeout=60.0) as transport:
            response = transport.send(RequestDescriptor("GET", "/models"), CancellationToken())
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
        headers: Mapping[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Per-attempt timeout in seconds
            base_url: Optional base URL joined with relative request URLs
            headers: Default headers for all requests
            client: Pre-built httpx.Client (tests, custom TLS); owned by the caller
        """
        self._timeout = timeout
        self._base_url = base_url
        self._default_headers = dict(headers or {})
        self._owns_client = client is None
        # httpx.Client is thread-safe; the pool handles concurrent sends.
        self._client = client or httpx.Client(
            timeout=timeout,
            limits=DEFAULT_LIMITS,
            follow_redirects=False,
        )

    def _resolve_url(self, url: str) -> str:
        """Append relative paths to base_url; absolute URLs pass through."""
        if self._base_url is None or httpx.URL(url).is_absolute_url:
            return url
        return f"{self._base_url.rstrip('/')}/{url.lstrip('/')}"

    def _effective_timeout(self, cancel: CancellationToken) -> float:
        # Never let one attempt outlive the caller's deadline
        remaining = cancel.remaining()
        if remaining is None:
            return self._timeout
        return min(self._timeout, remaining)

    def send(self, request: RequestDescriptor, cancel: CancellationToken) -> ResponseDescriptor:
        """Send ``request`` once.

        Returns:
            Fully read response, whatever its status code

        Raises:
            TransportError: If no response was obtained
            RequestCancelledError: If the token fired while the request was in flight
        """
        cancel.raise_if_cancelled()

        full_url = self._resolve_url(request.url)
        merged_headers = {**self._default_headers, **request.headers}
        timeout = self._effective_timeout(cancel)

        logger.debug(
            "http_request",
            method=request.method,
            url=full_url,
            headers=redact(merged_headers),
            timeout=timeout,
        )

        http_request = self._client.build_request(
            request.method,
            full_url,
            headers=merged_headers,
            content=request.body(),
            timeout=timeout,
        )

        start = time.perf_counter()
        try:
            # stream=False: the body is read into memory and the connection released
            response = self._client.send(http_request, follow_redirects=False)
        except httpx.TransportError as e:
            if cancel.cancelled:
                raise RequestCancelledError(cancel.reason or CancellationReason.CANCELLED) from e
            raise TransportError(f"{request.method} {full_url}: {type(e).__name__}: {e}") from e

        try:
            latency = time.perf_counter() - start
            logger.debug(
                "http_response",
                method=request.method,
                url=full_url,
                status_code=response.status_code,
                latency_ms=latency * 1000,
            )
            return ResponseDescriptor(
                status_code=response.status_code,
                headers=response.headers,
                content=response.content,
                elapsed_seconds=latency,
            )
        finally:
            response.close()

    def close(self) -> None:
        """Close the underlying httpx client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
