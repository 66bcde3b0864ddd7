"""Shared fixtures: sample documents and mock HTTP transports."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

SAMPLE_DOCUMENT = {
    "version": "3.0.0",
    "gauges": {
        "jvm.memory.total.used": {"value": 123456789},
        "jvm.threads.load": {"value": 0.75},
        "jvm.attribute.name": {"value": "12345@app-host"},
    },
    "counters": {
        "requests.total": {"count": 42},
    },
    "histograms": {
        "response.size": {
            "count": 10,
            "max": 512,
            "mean": 128.5,
            "min": 16,
            "p50": 100.0,
            "p75": 150.0,
            "p95": 300.0,
            "p98": 400.0,
            "p99": 450.0,
            "p999": 510.0,
            "stddev": 40.25,
        },
    },
    "meters": {
        "requests.rate": {
            "count": 1000,
            "m15_rate": 1.5,
            "m1_rate": 2.5,
            "m5_rate": 2.0,
            "mean_rate": 1.75,
            "units": "events/second",
        },
    },
    "timers": {
        "requests.latency": {
            "count": 500,
            "max": 0.9,
            "mean": 0.12,
            "min": 0.01,
            "p50": 0.1,
            "p75": 0.15,
            "p95": 0.4,
            "p98": 0.6,
            "p99": 0.7,
            "p999": 0.85,
            "stddev": 0.05,
            "m15_rate": 3.5,
            "m1_rate": 4.5,
            "m5_rate": 4.0,
            "mean_rate": 3.75,
            "duration_units": "seconds",
            "rate_units": "calls/second",
        },
    },
}


@pytest.fixture
def sample_document() -> dict:
    return json.loads(json.dumps(SAMPLE_DOCUMENT))


@pytest.fixture
def sample_body(sample_document: dict) -> bytes:
    return json.dumps(sample_document).encode()


@pytest.fixture
def routes_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for a MockTransport that serves fixed bodies per URL.

    Each route maps a URL to ``bytes`` (200 response), a ``(status, bytes)``
    tuple, or an exception instance to raise. ``delay`` seconds are slept
    before every response.
    """

    def _build(routes: dict[str, object], delay: float = 0.0) -> httpx.MockTransport:
        async def handler(request: httpx.Request) -> httpx.Response:
            if delay:
                await asyncio.sleep(delay)
            route = routes.get(str(request.url))
            if route is None:
                raise httpx.ConnectError("connection refused", request=request)
            if isinstance(route, Exception):
                raise route
            if isinstance(route, tuple):
                status, body = route
                return httpx.Response(status, content=body)
            return httpx.Response(200, content=route)

        return httpx.MockTransport(handler)

    return _build
