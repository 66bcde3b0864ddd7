"""Typed model of the Dropwizard metrics JSON document and its decoder."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import IO, Any, Callable, TypeVar

from .errors import DecodeError
from .gauge import GaugeValue, gauge_token, parse_gauge_value, parse_int64

T = TypeVar("T")


class NumberToken(str):
    """A JSON number kept as its literal text until a field type is known."""


@dataclass
class Gauge:
    value: GaugeValue = field(default_factory=GaugeValue)


@dataclass
class Counter:
    count: int = 0


@dataclass
class Histogram:
    count: int = 0
    max: int = 0
    mean: float = 0.0
    min: int = 0
    p50: float = 0.0
    p75: float = 0.0
    p95: float = 0.0
    p98: float = 0.0
    p99: float = 0.0
    p999: float = 0.0
    stddev: float = 0.0


@dataclass
class Meter:
    count: int = 0
    m15_rate: float = 0.0
    m1_rate: float = 0.0
    m5_rate: float = 0.0
    mean_rate: float = 0.0
    units: str = ""


@dataclass
class Timer:
    count: int = 0
    max: float = 0.0
    mean: float = 0.0
    min: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p95: float = 0.0
    p98: float = 0.0
    p99: float = 0.0
    p999: float = 0.0
    stddev: float = 0.0
    m15_rate: float = 0.0
    m1_rate: float = 0.0
    m5_rate: float = 0.0
    mean_rate: float = 0.0
    duration_units: str = ""
    rate_units: str = ""


@dataclass
class MetricsDocument:
    version: str = ""
    gauges: dict[str, Gauge] = field(default_factory=dict)
    counters: dict[str, Counter] = field(default_factory=dict)
    histograms: dict[str, Histogram] = field(default_factory=dict)
    meters: dict[str, Meter] = field(default_factory=dict)
    timers: dict[str, Timer] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def _int_field(raw: Any, where: str) -> int:
    if raw is None:
        return 0
    if isinstance(raw, NumberToken):
        value = parse_int64(raw)
        if value is not None:
            return value
    raise DecodeError(f"{where}: expected int64, got {raw!r}")


def _float_field(raw: Any, where: str) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, NumberToken):
        value = float(raw)
        if math.isfinite(value):
            return value
        raise DecodeError(f"{where}: {raw} overflows float64")
    raise DecodeError(f"{where}: expected number, got {raw!r}")


def _str_field(raw: Any, where: str) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str) and not isinstance(raw, NumberToken):
        return raw
    raise DecodeError(f"{where}: expected string, got {raw!r}")


def _coerce(cls: Callable[..., T], payload: dict[str, Any], where: str) -> T:
    """Build a payload dataclass, converting each declared field by its type."""
    kwargs: dict[str, Any] = {}
    for f in cls.__dataclass_fields__.values():  # type: ignore[attr-defined]
        raw = payload.get(f.name)
        key = f"{where}.{f.name}"
        if f.type == "int":
            kwargs[f.name] = _int_field(raw, key)
        elif f.type == "float":
            kwargs[f.name] = _float_field(raw, key)
        else:
            kwargs[f.name] = _str_field(raw, key)
    return cls(**kwargs)


def _gauge(payload: dict[str, Any], where: str) -> Gauge:
    if "value" not in payload:
        return Gauge()
    return Gauge(value=parse_gauge_value(gauge_token(payload["value"])))


_KINDS: dict[str, Callable[[dict[str, Any], str], Any]] = {
    "gauges": _gauge,
    "counters": lambda p, w: _coerce(Counter, p, w),
    "histograms": lambda p, w: _coerce(Histogram, p, w),
    "meters": lambda p, w: _coerce(Meter, p, w),
    "timers": lambda p, w: _coerce(Timer, p, w),
}


def _reject_constant(name: str) -> Any:
    raise DecodeError(f"invalid JSON literal {name}")


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------

def decode_document(data: bytes | str) -> MetricsDocument:
    """Parse one metrics document. Raises DecodeError on any malformed input.

    Unknown keys are ignored and missing numeric fields decode as zero.
    """
    try:
        root = json.loads(
            data,
            parse_int=NumberToken,
            parse_float=NumberToken,
            parse_constant=_reject_constant,
        )
    except (ValueError, RecursionError) as exc:
        raise DecodeError(f"malformed JSON: {exc}") from exc

    document = MetricsDocument()
    if root is None:
        return document
    if not isinstance(root, dict):
        raise DecodeError(f"expected a JSON object, got {type(root).__name__}")

    document.version = _str_field(root.get("version"), "version")

    for kind, build in _KINDS.items():
        section = root.get(kind)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise DecodeError(f"{kind}: expected an object, got {type(section).__name__}")

        decoded = getattr(document, kind)
        for name, payload in section.items():
            where = f"{kind}[{name!r}]"
            if payload is None:
                payload = {}
            elif not isinstance(payload, dict):
                raise DecodeError(f"{where}: expected an object, got {type(payload).__name__}")
            decoded[name] = build(payload, where)

    return document


def read_document(stream: IO[bytes]) -> MetricsDocument:
    return decode_document(stream.read())
