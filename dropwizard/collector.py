"""Collector for Dropwizard-formatted JSON metrics served over HTTP."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from .base import Accumulator, BaseCollector, CollectorResult
from .errors import CollectorError, EndpointError
from .normalize import emit, normalize
from .schema import decode_document
from .sinks import MemoryAccumulator
from .transport import TransportSettings, build_client, fetch

logger = logging.getLogger(__name__)

DEFAULT_URLS = ["http://localhost:8081/metrics"]


class DropwizardCollector(BaseCollector):
    """Polls one or more Dropwizard ``/metrics`` endpoints concurrently.

    The HTTP client is built on the first pass and reused afterwards. Passes
    on one collector are not expected to overlap.
    """

    def __init__(
        self,
        name: str,
        urls: list[str] | None = None,
        settings: TransportSettings | None = None,
        poll_every: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(name, poll_every)
        self.urls = list(urls) if urls else list(DEFAULT_URLS)
        self.settings = settings or TransportSettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return ", ".join(self.urls)

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = build_client(self.settings, self._transport)
                logger.info("%s: http client ready (timeout=%gs)", self.name, self.settings.timeout)
            return self._client

    async def gather_url(self, client: httpx.AsyncClient, acc: Accumulator, url: str) -> None:
        """Fetch, decode and emit one endpoint. All records share one timestamp."""
        now = time.time()
        body = await fetch(client, url, self.settings.timeout)
        # Off the event loop so a large body does not stall sibling pipelines.
        document = await asyncio.to_thread(decode_document, body)
        count = 0
        for record in normalize(document, now):
            emit(acc, record)
            count += 1
        logger.debug("%s: %d records from %s", self.name, count, url)

    async def _run(
        self, client: httpx.AsyncClient, acc: Accumulator, url: str, errors: list[EndpointError]
    ) -> None:
        try:
            await self.gather_url(client, acc, url)
        except CollectorError as exc:
            error = EndpointError(url, exc)
            logger.warning("%s: %s", self.name, error)
            errors.append(error)
            acc.add_error(error)

    async def gather(self, acc: Accumulator) -> list[EndpointError]:
        """One collection pass over every URL.

        Raises ConfigurationError if the client cannot be built; otherwise
        per-URL failures are reported to ``acc`` and returned, never raised.
        """
        client = await self._get_client()
        errors: list[EndpointError] = []
        outcomes = await asyncio.gather(
            *(self._run(client, acc, url, errors) for url in self.urls),
            return_exceptions=True,
        )
        # Anything that is not a CollectorError is a bug; surface it only
        # after every sibling pipeline has finished.
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        logger.debug("%s: pass done, %d/%d endpoints failed", self.name, len(errors), len(self.urls))
        return errors

    async def collect(self) -> CollectorResult:
        acc = MemoryAccumulator()
        await self.gather(acc)
        return CollectorResult(records=acc.records, errors=acc.errors)

    async def aclose(self) -> None:
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self) -> DropwizardCollector:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
