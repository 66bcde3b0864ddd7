"""Glob-based name and field filtering applied on the way to a sink."""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field

from .base import Accumulator, FieldValue
from .errors import EndpointError


def _matches(value: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatchcase(value, pattern) for pattern in patterns)


@dataclass
class MetricFilter:
    namepass: list[str] = field(default_factory=list)
    namedrop: list[str] = field(default_factory=list)
    fieldpass: list[str] = field(default_factory=list)
    fielddrop: list[str] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.namepass or self.namedrop or self.fieldpass or self.fielddrop)

    def name_allowed(self, name: str) -> bool:
        if self.namepass and not _matches(name, self.namepass):
            return False
        if self.namedrop and _matches(name, self.namedrop):
            return False
        return True

    def filter_fields(self, fields: dict[str, FieldValue]) -> dict[str, FieldValue]:
        kept = {}
        for key, value in fields.items():
            if self.fieldpass and not _matches(key, self.fieldpass):
                continue
            if self.fielddrop and _matches(key, self.fielddrop):
                continue
            kept[key] = value
        return kept


class FilteringAccumulator:
    """Wraps another accumulator and forwards only what the filter lets through.

    A record left with no fields after filtering is dropped entirely.
    """

    def __init__(self, inner: Accumulator, metric_filter: MetricFilter) -> None:
        self.inner = inner
        self.filter = metric_filter

    def _apply(self, name: str, fields: dict[str, FieldValue]) -> dict[str, FieldValue] | None:
        if not self.filter.name_allowed(name):
            return None
        kept = self.filter.filter_fields(fields)
        return kept or None

    def add_gauge(self, name, fields, tags, timestamp) -> None:
        kept = self._apply(name, fields)
        if kept is not None:
            self.inner.add_gauge(name, kept, tags, timestamp)

    def add_counter(self, name, fields, tags, timestamp) -> None:
        kept = self._apply(name, fields)
        if kept is not None:
            self.inner.add_counter(name, kept, tags, timestamp)

    def add_histogram(self, name, fields, tags, timestamp) -> None:
        kept = self._apply(name, fields)
        if kept is not None:
            self.inner.add_histogram(name, kept, tags, timestamp)

    def add_fields(self, name, fields, tags, timestamp) -> None:
        kept = self._apply(name, fields)
        if kept is not None:
            self.inner.add_fields(name, kept, tags, timestamp)

    def add_error(self, error: EndpointError) -> None:
        self.inner.add_error(error)
