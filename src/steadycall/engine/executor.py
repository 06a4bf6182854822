"""RequestExecutor: one logical call as a bounded sequence of attempts.

State machine:
    Idle -> Attempting -> (Success | Retrying | Failed)
    Retrying -> Attempting after an uninterrupted, cancellable wait

The attempt loop is driven by tenacity:
- stop after ``policy.max_retries + 1`` attempts
- retry only outcomes the classifier marks retryable
- wait for the server's Retry-After on a 429 when it is positive,
  otherwise for the jittered exponential backoff
- sleep on the caller's CancellationToken, so cancellation pre-empts the wait
- reraise the LAST observed failure once the budget is exhausted, never a
  generic "retries exceeded" error

Example:
    executor = RequestExecutor(HttpxTransport(), RetryPolicy(max_retries=3), operation="openai.create_response")
    response = executor.execute(RequestDescriptor.for_json("POST", url, payload), CancellationToken(timeout=30))
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import httpx
import structlog
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt

from steadycall.clients.base import Transport
from steadycall.contracts.enums import ExecutorState
from steadycall.contracts.errors import (
    ConfigurationError,
    RateLimitError,
    RequestCancelledError,
    SteadyCallError,
    TransportError,
)
from steadycall.contracts.http import RequestDescriptor, ResponseDescriptor
from steadycall.contracts.retry import RetryPolicy
from steadycall.core.cancellation import CancellationToken
from steadycall.core.correlation import get_correlation_id
from steadycall.engine.backoff import compute_backoff
from steadycall.engine.classifier import is_retryable_error
from steadycall.engine.error_mapper import map_error_response, rate_limit_error_from
from steadycall.engine.hooks import NO_HOOKS, ExecutorHooks
from steadycall.engine.rate_limit import extract_rate_limit

logger = structlog.get_logger(__name__)

THROTTLED_STATUS = 429


class RequestExecutor:
    """Executes requests through a transport with retries and backoff.

    The executor holds no per-call state: one instance may serve many
    threads concurrently, each call running its own attempt loop. The
    policy is immutable and shared read-only.
    """

    def __init__(
        self,
        transport: Transport,
        policy: RetryPolicy,
        *,
        operation: str = "request",
        hooks: ExecutorHooks | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            transport: Performs one physical exchange per attempt
            policy: Retry budget and backoff bounds
            operation: Label attached to errors crossing this boundary
            hooks: Optional observability callbacks
            rng: Jitter source; seed it for reproducible delays. One value is
                drawn per backoff wait actually slept

        Raises:
            ConfigurationError: If policy or transport are not usable
        """
        if not isinstance(policy, RetryPolicy):
            raise ConfigurationError(f"policy must be a RetryPolicy, got {type(policy).__name__}")
        if not isinstance(transport, Transport):
            raise ConfigurationError(f"transport must implement send() and close(), got {type(transport).__name__}")
        self._transport = transport
        self._policy = policy
        self._operation = operation
        self._hooks = hooks or NO_HOOKS
        self._rng = rng

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def operation(self) -> str:
        return self._operation

    def execute(self, request: RequestDescriptor, cancel: CancellationToken | None = None) -> ResponseDescriptor:
        """Run one logical call until success, a permanent failure, or budget exhaustion.

        Args:
            request: Request to send; its body is regenerated per attempt
            cancel: Cancellation signal (a never-firing token when None)

        Returns:
            The successful response with its RateLimitSnapshot attached

        Raises:
            RequestCancelledError: If the token fires before or during the call
            RateLimitError: If the last attempt was throttled (429)
            ApiError: If the last attempt returned another non-success status
            TransportError: If the last attempt obtained no response
        """
        token = cancel if cancel is not None else CancellationToken()
        log = logger.bind(operation=self._operation, method=request.method, url=request.url)

        try:
            # Idle -> Failed: an already-cancelled call makes no network call
            token.raise_if_cancelled()

            for attempt_state in Retrying(
                stop=stop_after_attempt(self._policy.max_attempts),
                wait=self._wait_seconds,
                retry=retry_if_exception(is_retryable_error),
                sleep=token.sleep,
                before_sleep=self._make_before_sleep(log),
                reraise=True,
            ):
                with attempt_state:
                    attempt = attempt_state.retry_state.attempt_number - 1
                    return self._attempt(request, token, attempt, log)

        except RequestCancelledError as exc:
            log.info("request_cancelled", state=ExecutorState.FAILED, reason=str(exc.reason))
            self._emit(self._hooks.on_error, exc)
            raise
        except SteadyCallError as exc:
            log.warning(
                "request_failed",
                state=ExecutorState.FAILED,
                error=str(exc),
                error_kind=str(exc.kind),
            )
            self._emit(self._hooks.on_error, exc)
            raise
        except Exception as exc:
            # Not a classified failure: never retried, still reported once
            log.error(
                "request_failed",
                state=ExecutorState.FAILED,
                error=repr(exc),
                error_kind="unexpected",
            )
            self._emit(self._hooks.on_error, exc)
            raise

        # Retrying always returns or raises
        raise RuntimeError("Unexpected state in retry loop")  # pragma: no cover

    def _attempt(
        self,
        request: RequestDescriptor,
        token: CancellationToken,
        attempt: int,
        log: Any,
    ) -> ResponseDescriptor:
        """One physical attempt. Returns on 2xx, raises a classified error otherwise."""
        token.raise_if_cancelled()
        self._emit(self._hooks.on_request_start, request.method, request.url)
        log.debug("request_attempt", state=ExecutorState.ATTEMPTING, attempt=attempt)

        start = time.perf_counter()
        try:
            response = self._transport.send(request, token)
        except TransportError as exc:
            log.warning("request_attempt_failed", attempt=attempt, error=exc.message, error_kind=str(exc.kind))
            raise TransportError(exc.message, operation=self._operation) from exc
        except httpx.TransportError as exc:
            log.warning("request_attempt_failed", attempt=attempt, error=str(exc), error_kind="transport")
            raise TransportError(f"{type(exc).__name__}: {exc}", operation=self._operation) from exc
        elapsed = time.perf_counter() - start

        # A cancelled call never succeeds, even if the exchange completed
        token.raise_if_cancelled()

        snapshot = extract_rate_limit(response.headers)

        if response.is_success:
            log.debug(
                "request_succeeded",
                state=ExecutorState.SUCCESS,
                attempt=attempt,
                status_code=response.status_code,
                latency_ms=elapsed * 1000,
            )
            self._emit(self._hooks.on_response, response.status_code, elapsed)
            return replace(response, rate_limit=snapshot)

        error = map_error_response(
            response.status_code,
            response.content,
            correlation_id=get_correlation_id() or response.request_id,
            operation=self._operation,
        )
        if response.status_code == THROTTLED_STATUS:
            error = rate_limit_error_from(error, snapshot)

        log.warning(
            "request_attempt_failed",
            attempt=attempt,
            status_code=error.status_code,
            code=error.code,
            retryable=error.retryable,
        )
        raise error

    def _wait_seconds(self, retry_state: RetryCallState) -> float:
        """Server hint for a throttled attempt, computed backoff otherwise."""
        if retry_state.attempt_number >= self._policy.max_attempts:
            # tenacity asks for a wait before checking stop; nothing will sleep
            return 0.0
        attempt = retry_state.attempt_number - 1
        error = retry_state.outcome.exception() if retry_state.outcome is not None else None
        if isinstance(error, RateLimitError) and error.rate_limit.retry_after_seconds > 0:
            return error.rate_limit.retry_after_seconds
        return compute_backoff(attempt, self._policy, rng=self._rng)

    def _make_before_sleep(self, log: Any) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            attempt = retry_state.attempt_number - 1
            delay = retry_state.next_action.sleep if retry_state.next_action is not None else 0.0
            error = retry_state.outcome.exception() if retry_state.outcome is not None else None
            log.info(
                "retry_scheduled",
                state=ExecutorState.RETRYING,
                attempt=attempt,
                next_attempt=attempt + 1,
                max_retries=self._policy.max_retries,
                delay_seconds=round(delay, 3),
                error=str(error),
            )
            if error is not None:
                self._emit(self._hooks.on_retry, attempt, error, delay)

        return before_sleep

    def _emit(self, hook: Callable[..., None] | None, *args: Any) -> None:
        # Hook failures must not change the outcome of the call
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as hook_err:
            logger.warning(
                "executor_hook_failed",
                operation=self._operation,
                hook=getattr(hook, "__name__", repr(hook)),
                error=str(hook_err),
                error_type=type(hook_err).__name__,
            )
