"""Output record model, accumulator protocol and shared result types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .errors import EndpointError

FieldValue = int | float | str


class RecordKind(Enum):
    """Accumulator channel a record is delivered through."""

    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"
    FIELDS = "fields"


@dataclass
class OutputRecord:
    kind: RecordKind
    name: str
    fields: dict[str, FieldValue]
    timestamp: float
    tags: dict[str, str] | None = None


class Accumulator(Protocol):
    """Sink that normalized records and per-endpoint errors are handed to."""

    def add_gauge(
        self, name: str, fields: dict[str, FieldValue], tags: dict[str, str] | None, timestamp: float
    ) -> None: ...

    def add_counter(
        self, name: str, fields: dict[str, FieldValue], tags: dict[str, str] | None, timestamp: float
    ) -> None: ...

    def add_histogram(
        self, name: str, fields: dict[str, FieldValue], tags: dict[str, str] | None, timestamp: float
    ) -> None: ...

    def add_fields(
        self, name: str, fields: dict[str, FieldValue], tags: dict[str, str] | None, timestamp: float
    ) -> None: ...

    def add_error(self, error: EndpointError) -> None: ...


@dataclass
class CollectorResult:
    records: list[OutputRecord] = field(default_factory=list)
    errors: list[EndpointError] = field(default_factory=list)

    @property
    def reachable(self) -> bool:
        return not self.errors


class BaseCollector(ABC):
    """Abstract base for all metric collectors."""

    def __init__(self, name: str, poll_every: float = 5) -> None:
        self.name = name
        self.poll_every = poll_every

    @abstractmethod
    async def gather(self, acc: Accumulator) -> list[EndpointError]:
        """Run one collection pass into ``acc`` and return per-endpoint errors."""
        ...

    @abstractmethod
    async def collect(self) -> CollectorResult:
        """Run one pass into a fresh in-memory accumulator."""
        ...
