"""Transports that perform the physical request/response exchange."""

from steadycall.clients.base import Transport
from steadycall.clients.http import HttpxTransport

__all__ = ["HttpxTransport", "Transport"]
