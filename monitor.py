#!/usr/bin/env python3
"""Dropwizard Monitor — poll Dropwizard /metrics endpoints and print line protocol.

Usage:
    python monitor.py                    # use default config/servers.yaml
    python monitor.py -c myconfig.yaml   # use custom config
    python monitor.py --once             # single collection pass, then exit
    python monitor.py --sample-config    # print an annotated sample config
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dropwizard.config import DESCRIPTION, SAMPLE_CONFIG, Server, configure_logging, load_config
from dropwizard.errors import ConfigurationError
from dropwizard.filters import FilteringAccumulator
from dropwizard.sinks import LineProtocolPrinter

logger = logging.getLogger("dropwizard.monitor")


async def poll_once(server: Server, printer: LineProtocolPrinter) -> int:
    """Run one pass for ``server`` and return the number of failed endpoints."""
    acc = FilteringAccumulator(printer, server.metric_filter)
    try:
        errors = await server.collector.gather(acc)
    except ConfigurationError as exc:
        logger.error("%s: %s", server.name, exc)
        return len(server.collector.urls)
    return len(errors)


async def _poll_loop(server: Server, printer: LineProtocolPrinter) -> None:
    while True:
        await poll_once(server, printer)
        await asyncio.sleep(server.collector.poll_every)


async def run(servers: list[Server], once: bool) -> int:
    printer = LineProtocolPrinter(sys.stdout)
    try:
        if once:
            failed = await asyncio.gather(*(poll_once(s, printer) for s in servers))
            return 1 if any(failed) else 0
        await asyncio.gather(*(_poll_loop(s, printer) for s in servers))
        return 0
    finally:
        for server in servers:
            await server.collector.aclose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=DESCRIPTION)
    parser.add_argument(
        "-c", "--config",
        default=str(Path(__file__).parent / "config" / "servers.yaml"),
        help="Path to servers.yaml config file",
    )
    parser.add_argument("--once", action="store_true", help="Run a single collection pass and exit")
    parser.add_argument("--sample-config", action="store_true", help="Print a sample config and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    if args.sample_config:
        print(SAMPLE_CONFIG, end="")
        return

    configure_logging(args.verbose)

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)

    try:
        servers = load_config(config_path)
    except ConfigurationError as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        sys.exit(1)
    if not servers:
        print("No servers configured. Edit config/servers.yaml", file=sys.stderr)
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run(servers, args.once)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
