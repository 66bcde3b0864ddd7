"""Accumulators: in-memory collection and line-protocol output."""

from __future__ import annotations

import logging
import math
import sys
from typing import TextIO

from .base import FieldValue, OutputRecord, RecordKind
from .errors import EndpointError

logger = logging.getLogger(__name__)


class MemoryAccumulator:
    """Keeps every record and error it is given, in arrival order."""

    def __init__(self) -> None:
        self.records: list[OutputRecord] = []
        self.errors: list[EndpointError] = []

    def _add(
        self,
        kind: RecordKind,
        name: str,
        fields: dict[str, FieldValue],
        tags: dict[str, str] | None,
        timestamp: float,
    ) -> None:
        self.records.append(OutputRecord(kind, name, dict(fields), timestamp, tags))

    def add_gauge(self, name, fields, tags, timestamp) -> None:
        self._add(RecordKind.GAUGE, name, fields, tags, timestamp)

    def add_counter(self, name, fields, tags, timestamp) -> None:
        self._add(RecordKind.COUNTER, name, fields, tags, timestamp)

    def add_histogram(self, name, fields, tags, timestamp) -> None:
        self._add(RecordKind.HISTOGRAM, name, fields, tags, timestamp)

    def add_fields(self, name, fields, tags, timestamp) -> None:
        self._add(RecordKind.FIELDS, name, fields, tags, timestamp)

    def add_error(self, error: EndpointError) -> None:
        self.errors.append(error)

    def find(self, name: str) -> list[OutputRecord]:
        return [r for r in self.records if r.name == name]


# ---------------------------------------------------------------------------
# Line protocol
# ---------------------------------------------------------------------------

def _escape_key(text: str) -> str:
    return text.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


def _format_value(value: FieldValue) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return repr(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_line(record: OutputRecord) -> str | None:
    """One InfluxDB line-protocol line, or None when no field is representable."""
    measurement = record.name.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")
    if record.tags:
        tag_set = ",".join(f"{_escape_key(k)}={_escape_key(v)}" for k, v in sorted(record.tags.items()))
        measurement = f"{measurement},{tag_set}"

    pairs = []
    for key, value in record.fields.items():
        formatted = _format_value(value)
        if formatted is not None:
            pairs.append(f"{_escape_key(key)}={formatted}")
    if not pairs:
        return None
    return f"{measurement} {','.join(pairs)} {int(record.timestamp * 1_000_000_000)}"


class LineProtocolPrinter(MemoryAccumulator):
    """Writes each record as a line-protocol line as soon as it arrives."""

    def __init__(self, out: TextIO | None = None, keep: bool = False) -> None:
        super().__init__()
        self.out = out if out is not None else sys.stdout
        self.keep = keep

    def _add(self, kind, name, fields, tags, timestamp) -> None:
        record = OutputRecord(kind, name, dict(fields), timestamp, tags)
        if self.keep:
            self.records.append(record)
        line = format_line(record)
        if line is not None:
            self.out.write(line + "\n")

    def add_error(self, error: EndpointError) -> None:
        super().add_error(error)
        logger.error("%s", error)
