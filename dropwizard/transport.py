"""Shared HTTP client construction and the per-endpoint GET."""

from __future__ import annotations

import asyncio
import logging
import ssl
from dataclasses import dataclass

import httpx

from .errors import BadStatusError, ConfigurationError, EndpointConnectionError, EndpointTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class TransportSettings:
    ssl_ca: str | None = None
    ssl_cert: str | None = None
    ssl_key: str | None = None
    insecure_skip_verify: bool = False
    # Seconds; used for both the response-header wait and the whole request.
    # 0 means no limit.
    timeout: float = DEFAULT_TIMEOUT


def build_ssl_context(settings: TransportSettings) -> ssl.SSLContext | bool:
    """SSL context for the configured CA, client cert and verification mode.

    Returns ``True`` (library defaults) when no TLS option is set.
    """
    if not (settings.ssl_ca or settings.ssl_cert or settings.ssl_key or settings.insecure_skip_verify):
        return True

    if bool(settings.ssl_cert) != bool(settings.ssl_key):
        raise ConfigurationError("ssl_cert and ssl_key must be configured together")

    try:
        context = ssl.create_default_context(cafile=settings.ssl_ca or None)
        if settings.ssl_cert:
            context.load_cert_chain(settings.ssl_cert, settings.ssl_key)
    except OSError as exc:
        raise ConfigurationError(f"could not load TLS material: {exc}") from exc

    if settings.insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def build_client(
    settings: TransportSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    verify = build_ssl_context(settings)
    if settings.insecure_skip_verify:
        logger.warning("insecure_skip_verify is enabled; certificates will not be checked")
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout or None),
        verify=verify,
        transport=transport,
    )


async def _get(client: httpx.AsyncClient, url: str) -> bytes:
    async with client.stream("GET", url) as response:
        body = await response.aread()
    if not response.is_success:
        raise BadStatusError(response.status_code, response.reason_phrase)
    return body


async def fetch(client: httpx.AsyncClient, url: str, timeout: float) -> bytes:
    """GET ``url`` and return the full body.

    The response is always closed before returning. ``timeout`` bounds the
    whole exchange (0 disables it); the client's own timeout bounds each
    network wait.
    """
    try:
        return await asyncio.wait_for(_get(client, url), timeout or None)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise EndpointTimeoutError(f"request timed out after {timeout:g}s") from exc
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise EndpointConnectionError(str(exc) or exc.__class__.__name__) from exc
