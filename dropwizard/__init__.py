from .base import Accumulator, BaseCollector, CollectorResult, OutputRecord, RecordKind
from .collector import DEFAULT_URLS, DropwizardCollector
from .errors import (
    BadStatusError,
    CollectorError,
    ConfigurationError,
    DecodeError,
    EndpointConnectionError,
    EndpointError,
    EndpointTimeoutError,
)
from .filters import FilteringAccumulator, MetricFilter
from .gauge import GaugeType, GaugeValue, parse_gauge_value
from .normalize import emit, normalize
from .schema import MetricsDocument, decode_document
from .sinks import LineProtocolPrinter, MemoryAccumulator
from .transport import TransportSettings

__all__ = [
    "Accumulator",
    "BaseCollector",
    "CollectorResult",
    "OutputRecord",
    "RecordKind",
    "DEFAULT_URLS",
    "DropwizardCollector",
    "BadStatusError",
    "CollectorError",
    "ConfigurationError",
    "DecodeError",
    "EndpointConnectionError",
    "EndpointError",
    "EndpointTimeoutError",
    "FilteringAccumulator",
    "MetricFilter",
    "GaugeType",
    "GaugeValue",
    "parse_gauge_value",
    "emit",
    "normalize",
    "MetricsDocument",
    "decode_document",
    "LineProtocolPrinter",
    "MemoryAccumulator",
    "TransportSettings",
]
