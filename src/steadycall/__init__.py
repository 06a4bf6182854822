"""
steadycall: a resilient request-execution core for rate-limited JSON/HTTP APIs.

Every outbound call runs as a bounded sequence of attempts that either
succeeds, retries with jittered backoff (or the server's Retry-After hint),
or fails with a classified, inspectable error.
"""

__version__ = "0.1.0"
