"""OpenAI Responses API client built on the request executor.

Every call goes through RequestExecutor, so retries, backoff, Retry-After
handling, cancellation and error mapping are shared with any other
provider wired the same way.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import structlog
from pydantic import ValidationError

from steadycall.clients.base import Transport
from steadycall.clients.http import HttpxTransport
from steadycall.contracts.errors import RequestValidationError, ResponseDecodeError
from steadycall.contracts.http import RequestDescriptor
from steadycall.contracts.retry import RetryPolicy
from steadycall.core.cancellation import CancellationToken
from steadycall.core.config import ClientSettings, settings_from_env
from steadycall.engine.executor import RequestExecutor
from steadycall.engine.hooks import ExecutorHooks
from steadycall.providers.openai.models import CreateResponseRequest, Response

logger = structlog.get_logger(__name__)

CREATE_RESPONSE_OPERATION = "openai.create_response"
RESPONSES_PATH = "/responses"


class OpenAIClient:
    """Client for ``POST /responses``.

    Example:
        with OpenAIClient.from_env() as client:
            response = client.create_response({"model": "gpt-4o", "input": "Hello"})
            print(response.output_text)
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        transport: Transport | None = None,
        hooks: ExecutorHooks | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Validated client settings (API key, base URL, timeouts, retry)
            transport: Transport override; defaults to an HttpxTransport for settings.base_url
            hooks: Optional executor observability callbacks
        """
        self._settings = settings
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
        )
        self._executor = RequestExecutor(
            self._transport,
            RetryPolicy.from_settings(settings.retry),
            operation=CREATE_RESPONSE_OPERATION,
            hooks=hooks,
        )

    @classmethod
    def from_env(cls, *, transport: Transport | None = None, hooks: ExecutorHooks | None = None) -> OpenAIClient:
        """Build a client from OPENAI_API_KEY / OPENAI_BASE_URL.

        Raises:
            ConfigurationError: If OPENAI_API_KEY is not set
        """
        return cls(settings_from_env(), transport=transport, hooks=hooks)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._settings.api_key.get_secret_value()}"}

    def create_response(
        self,
        request: CreateResponseRequest | Mapping[str, Any],
        cancel: CancellationToken | None = None,
    ) -> Response:
        """Create a model response.

        Args:
            request: Request model, or a mapping validated into one
            cancel: Cancellation signal bounding the whole call, retries included

        Returns:
            Decoded response with the final attempt's RateLimitSnapshot attached

        Raises:
            RequestValidationError: If the request is invalid (nothing is sent)
            RequestCancelledError: If the token fires
            RateLimitError / ApiError / TransportError: Last failure once retries are exhausted
            ResponseDecodeError: If a successful body is not a valid response
        """
        if not isinstance(request, CreateResponseRequest):
            try:
                request = CreateResponseRequest.model_validate(request)
            except ValidationError as e:
                raise RequestValidationError(f"invalid create_response request: {e}") from e

        descriptor = RequestDescriptor.for_json(
            "POST",
            RESPONSES_PATH,
            request.to_payload(),
            headers=self._auth_headers(),
        )
        result = self._executor.execute(descriptor, cancel)

        try:
            payload = result.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ResponseDecodeError(f"response body is not valid JSON: {e}", operation=CREATE_RESPONSE_OPERATION) from e
        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                f"expected a JSON object, got {type(payload).__name__}",
                operation=CREATE_RESPONSE_OPERATION,
            )
        try:
            response = Response.model_validate(payload)
        except ValidationError as e:
            raise ResponseDecodeError(f"unexpected response shape: {e}", operation=CREATE_RESPONSE_OPERATION) from e

        logger.debug(
            "response_created",
            response_id=response.id,
            model=response.model,
            total_tokens=response.usage.total_tokens,
        )
        return response.model_copy(update={"rate_limit": result.rate_limit})

    def close(self) -> None:
        """Release the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
