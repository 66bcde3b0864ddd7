"""Gauge values: integer, float or free text, discriminated by token shape."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from enum import Enum

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class GaugeType(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"


@dataclass(frozen=True)
class GaugeValue:
    type: GaugeType = GaugeType.INT
    int_value: int = 0
    float_value: float = 0.0
    string_value: str = ""

    @property
    def numeric(self) -> int | float | None:
        """The int or float payload, or None for text gauges."""
        if self.type is GaugeType.INT:
            return self.int_value
        if self.type is GaugeType.FLOAT:
            return self.float_value
        return None


def parse_int64(token: str) -> int | None:
    if not _INT_RE.fullmatch(token):
        return None
    value = int(token, 10)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def _parse_float(token: str) -> float | None:
    if not _FLOAT_RE.fullmatch(token):
        return None
    value = float(token)
    # Literals that overflow a double are not numbers; NaN/Infinity spellings
    # never match the pattern, so they stay text.
    if math.isinf(value):
        return None
    return value


def parse_gauge_value(token: str) -> GaugeValue:
    """Decode raw gauge token text. Tries int64, then float64, then text.

    Never raises: anything that is not a number becomes a STRING gauge with
    one surrounding pair of double quotes removed.
    """
    int_value = parse_int64(token)
    if int_value is not None:
        return GaugeValue(type=GaugeType.INT, int_value=int_value)

    float_value = _parse_float(token)
    if float_value is not None:
        return GaugeValue(type=GaugeType.FLOAT, float_value=float_value)

    text = token
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return GaugeValue(type=GaugeType.STRING, string_value=text)


def gauge_token(raw: object) -> str:
    """Token text for an already-parsed JSON gauge value.

    Numbers come through as their literal text (see ``schema.NumberToken``),
    strings contribute their contents, and the JSON literals map back to
    ``null``/``true``/``false``.
    """
    if raw is None:
        return "null"
    if raw is True:
        return "true"
    if raw is False:
        return "false"
    if isinstance(raw, str):
        return str(raw)
    if isinstance(raw, (int, float)):
        return repr(raw)
    # Nested arrays/objects are kept as text and end up as STRING gauges.
    return json.dumps(raw, separators=(",", ":"))
