"""Transport contract used by the request executor."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from steadycall.contracts.http import RequestDescriptor, ResponseDescriptor
    from steadycall.core.cancellation import CancellationToken


@runtime_checkable
class Transport(Protocol):
    """Performs exactly one request/response exchange.

    Contract:
    - Returns a ResponseDescriptor for ANY received response, whatever its
      status; classifying the status is the executor's job.
    - Reads and releases the response body before returning.
    - Raises TransportError when no response was obtained.
    - Raises RequestCancelledError if the token fired while in flight.
    - Never retries internally; retries belong to the executor.
    """

    def send(self, request: RequestDescriptor, cancel: CancellationToken) -> ResponseDescriptor:
        """Send ``request`` once and return the fully read response."""
        ...

    def close(self) -> None:
        """Release pooled connections."""
        ...
