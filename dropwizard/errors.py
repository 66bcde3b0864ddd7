"""Error types raised while fetching and decoding Dropwizard endpoints."""

from __future__ import annotations


class CollectorError(Exception):
    """Base class for all collector failures."""


class ConfigurationError(CollectorError):
    """Invalid configuration or TLS material; the shared client cannot be built."""


class EndpointConnectionError(CollectorError):
    """DNS, TCP or TLS failure talking to one endpoint."""


class EndpointTimeoutError(CollectorError):
    """Response-header wait or overall request deadline exceeded."""


class BadStatusError(CollectorError):
    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"unexpected HTTP status {status_code} {reason}".rstrip())


class DecodeError(CollectorError):
    """Body is not well-formed JSON or does not have the metrics document shape."""


class EndpointError(CollectorError):
    """A per-endpoint failure tagged with the URL it came from."""

    def __init__(self, url: str, error: Exception) -> None:
        self.url = url
        self.error = error
        super().__init__(f"[url={url}]: {error}")
