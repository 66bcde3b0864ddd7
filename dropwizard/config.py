"""YAML configuration loading for the Dropwizard monitor."""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .collector import DropwizardCollector
from .errors import ConfigurationError
from .filters import MetricFilter
from .transport import DEFAULT_TIMEOUT, TransportSettings

logger = logging.getLogger(__name__)

DESCRIPTION = "Read Dropwizard-formatted JSON metrics from one or more HTTP endpoints"

SAMPLE_CONFIG = """\
servers:
  - name: my-service
    type: dropwizard
    ## seconds between collection passes
    poll_every: 10

    ## Works with Dropwizard metrics endpoint out of the box.
    ## Multiple URLs from which to read Dropwizard-formatted JSON.
    ## Default is "http://localhost:8081/metrics".
    urls:
      - http://localhost:8081/metrics

    ## Optional TLS config
    # ssl_ca: /etc/dropwizard-monitor/ca.pem
    # ssl_cert: /etc/dropwizard-monitor/cert.pem
    # ssl_key: /etc/dropwizard-monitor/key.pem
    ## Use TLS but skip chain & host verification
    # insecure_skip_verify: false

    ## http request & header timeout
    timeout: 10s

    ## exclude some built-in metrics
    # namedrop:
    #   - "jvm.classloader*"
    #   - "jvm.buffers*"
    #   - "jvm.gc*"
    #   - "jvm.memory.heap*"
    #   - "jvm.memory.non-heap*"
    #   - "jvm.memory.pools*"
    #   - "jvm.threads*"
    #   - "jvm.attribute.uptime"
    #   - "jvm.filedescriptor"
    #   - "io.dropwizard.jetty.MutableServletContextHandler*"
    #   - "org.eclipse.jetty.util*"

    ## include only the required fields (applies to all metric types)
    # fieldpass:
    #   - count
    #   - max
    #   - p999
    #   - m5_rate
    #   - value
"""

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str | int | float | None, default: float = DEFAULT_TIMEOUT) -> float:
    """Seconds from a duration such as ``"10s"``, ``"1m30s"`` or ``"250ms"``.

    Bare numbers are taken as seconds; ``None`` gives ``default``.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        if text == "0":
            return 0.0
        pos = 0
        seconds = 0.0
        for match in _DURATION_PART.finditer(text):
            if match.start() != pos:
                break
            seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            pos = match.end()
        if not text or pos != len(text):
            raise ConfigurationError(f"invalid duration {value!r}")
    if seconds < 0:
        raise ConfigurationError(f"invalid duration {value!r}")
    return seconds


def _str_list(srv: dict[str, Any], key: str) -> list[str]:
    raw = srv.get(key) or []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ConfigurationError(f"'{key}' must be a list of strings")
    return [str(item) for item in raw]


@dataclass
class Server:
    collector: DropwizardCollector
    metric_filter: MetricFilter = field(default_factory=MetricFilter)

    @property
    def name(self) -> str:
        return self.collector.name


def build_server(srv: dict[str, Any]) -> Server:
    """Build one collector and its filter from a ``servers:`` entry."""
    name = srv.get("name")
    if not name:
        raise ConfigurationError("every server needs a 'name'")

    settings = TransportSettings(
        ssl_ca=srv.get("ssl_ca") or None,
        ssl_cert=srv.get("ssl_cert") or None,
        ssl_key=srv.get("ssl_key") or None,
        insecure_skip_verify=bool(srv.get("insecure_skip_verify", False)),
        timeout=parse_duration(srv.get("timeout")),
    )
    collector = DropwizardCollector(
        name=str(name),
        urls=_str_list(srv, "urls"),
        settings=settings,
        poll_every=parse_duration(srv.get("poll_every"), default=10),
    )
    metric_filter = MetricFilter(
        namepass=_str_list(srv, "namepass"),
        namedrop=_str_list(srv, "namedrop"),
        fieldpass=_str_list(srv, "fieldpass"),
        fielddrop=_str_list(srv, "fielddrop"),
    )
    return Server(collector=collector, metric_filter=metric_filter)


def load_config(path: Path) -> list[Server]:
    """Parse a servers YAML file and return the configured servers."""
    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc

    if not isinstance(config, dict):
        raise ConfigurationError(f"{path}: expected a mapping at top level")

    servers: list[Server] = []
    for srv in config.get("servers") or []:
        if not isinstance(srv, dict):
            raise ConfigurationError(f"{path}: each server must be a mapping, got {srv!r}")
        stype = srv.get("type", "dropwizard")
        if stype != "dropwizard":
            logger.warning("unknown server type '%s' for '%s', skipping", stype, srv.get("name"))
            continue
        servers.append(build_server(srv))
    return servers


def configure_logging(verbose: bool = False) -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.addHandler(handler)
