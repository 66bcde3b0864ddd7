#!/usr/bin/env python3
"""Dropwizard Monitor — HTTP status service.

Usage:
    python web.py                              # default config, port 9860
    python web.py -c myconfig.yaml --port 8080 # custom config and port
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from dropwizard.config import Server, configure_logging, load_config
from dropwizard.errors import ConfigurationError
from dropwizard.filters import FilteringAccumulator
from dropwizard.sinks import MemoryAccumulator

logger = logging.getLogger("dropwizard.web")


# ---------------------------------------------------------------------------
# Shared state — latest snapshot per server
# ---------------------------------------------------------------------------

_state: dict[str, dict] = {}
_servers: list[Server] = []
_tasks: list[asyncio.Task] = []
_start_time: float = time.time()
_total_polls: int = 0
_total_records: int = 0
_total_errors: int = 0


def _json_fields(fields: dict) -> dict:
    # JSON has no NaN/Infinity; report those as null.
    return {
        k: None if isinstance(v, float) and not math.isfinite(v) else v
        for k, v in fields.items()
    }


def _snapshot(server: Server, acc: MemoryAccumulator, error: str | None = None) -> dict:
    errors = [{"url": e.url, "error": str(e.error)} for e in acc.errors]
    return {
        "name": server.name,
        "urls": server.collector.urls,
        "poll_every": server.collector.poll_every,
        "last_updated": time.time(),
        "records": [
            {
                "kind": r.kind.value,
                "name": r.name,
                "fields": _json_fields(r.fields),
                "tags": r.tags,
                "timestamp": r.timestamp,
            }
            for r in acc.records
        ],
        "errors": errors,
        "error": error,
    }


async def poll_server(server: Server) -> dict:
    """Run one pass for ``server`` and store its snapshot."""
    global _total_polls, _total_records, _total_errors
    acc = MemoryAccumulator()
    error = None
    try:
        await server.collector.gather(FilteringAccumulator(acc, server.metric_filter))
    except ConfigurationError as exc:
        logger.error("%s: %s", server.name, exc)
        error = str(exc)
    _total_polls += 1
    _total_records += len(acc.records)
    _total_errors += len(acc.errors) + (1 if error else 0)
    _state[server.name] = _snapshot(server, acc, error)
    return _state[server.name]


async def _poll_loop(server: Server) -> None:
    """Background poll loop for a single server."""
    while True:
        await poll_server(server)
        await asyncio.sleep(server.collector.poll_every)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start poll tasks on startup, cancel them and close clients on shutdown."""
    for s in _servers:
        _tasks.append(asyncio.create_task(_poll_loop(s)))
    yield
    for t in _tasks:
        t.cancel()
    await asyncio.gather(*_tasks, return_exceptions=True)
    _tasks.clear()
    for s in _servers:
        await s.collector.aclose()


app = FastAPI(title="Dropwizard Monitor", lifespan=lifespan)


@app.get("/api/status")
async def api_status():
    """Return the latest snapshot of every configured server."""
    servers = list(_state.values())
    return JSONResponse({"servers": servers, "timestamp": time.time()})


@app.get("/metrics")
async def metrics():
    """Self-monitoring endpoint, served in the Dropwizard JSON format."""
    snapshots = list(_state.values())
    healthy = sum(1 for s in snapshots if not s.get("errors") and not s.get("error"))
    errored = sum(1 for s in snapshots if s.get("errors") or s.get("error"))

    return JSONResponse({
        "version": "4.0.0",
        "gauges": {
            "monitor.servers.configured": {"value": len(_servers)},
            "monitor.servers.healthy": {"value": healthy},
            "monitor.servers.errored": {"value": errored},
            "monitor.uptime": {"value": round(time.time() - _start_time, 3)},
        },
        "counters": {
            "monitor.polls": {"count": _total_polls},
            "monitor.records": {"count": _total_records},
            "monitor.endpoint_errors": {"count": _total_errors},
        },
        "histograms": {},
        "meters": {},
        "timers": {},
    })


# ---------------------------------------------------------------------------
# CLI entrypoint
# ---------------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(description="Dropwizard Monitor — status service")
    parser.add_argument(
        "-c", "--config",
        default=str(Path(__file__).parent / "config" / "servers.yaml"),
        help="Path to servers.yaml config file",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=9860, help="Port (default: 9860)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    configure_logging(args.verbose)

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Config file not found: {config_path}")
        sys.exit(1)

    global _servers
    try:
        _servers = load_config(config_path)
    except ConfigurationError as exc:
        print(f"Invalid config: {exc}")
        sys.exit(1)
    if not _servers:
        print("No servers configured. Edit config/servers.yaml")
        sys.exit(1)

    print(f"Starting status service on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
