"""Turn a decoded metrics document into output records."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict
from typing import Any

from .base import Accumulator, FieldValue, OutputRecord, RecordKind
from .schema import MetricsDocument

HISTOGRAM_FIELDS = (
    "count", "max", "mean", "min",
    "p50", "p75", "p95", "p98", "p99", "p999",
    "stddev",
)
METER_FIELDS = ("count", "m15_rate", "m1_rate", "m5_rate", "mean_rate")
TIMER_FIELDS = HISTOGRAM_FIELDS + METER_FIELDS[1:]


def _select(payload: Any, names: tuple[str, ...]) -> dict[str, FieldValue]:
    values = asdict(payload)
    return {name: values[name] for name in names}


def normalize(document: MetricsDocument, now: float) -> Iterator[OutputRecord]:
    """Yield one record per metric name per kind, all stamped with ``now``.

    Text gauges are skipped. Meters share the histogram channel and timers
    go out as plain fields.
    """
    for name, gauge in document.gauges.items():
        value = gauge.value.numeric
        if value is None:
            continue
        yield OutputRecord(RecordKind.GAUGE, name, {"value": value}, now)

    for name, counter in document.counters.items():
        yield OutputRecord(RecordKind.COUNTER, name, {"count": counter.count}, now)

    for name, histogram in document.histograms.items():
        yield OutputRecord(RecordKind.HISTOGRAM, name, _select(histogram, HISTOGRAM_FIELDS), now)

    # TODO: carry meter `units` as a tag once tag extraction is supported.
    for name, meter in document.meters.items():
        yield OutputRecord(RecordKind.HISTOGRAM, name, _select(meter, METER_FIELDS), now)

    for name, timer in document.timers.items():
        yield OutputRecord(RecordKind.FIELDS, name, _select(timer, TIMER_FIELDS), now)


def emit(acc: Accumulator, record: OutputRecord) -> None:
    """Hand one record to the accumulator method matching its kind."""
    if record.kind is RecordKind.GAUGE:
        add = acc.add_gauge
    elif record.kind is RecordKind.COUNTER:
        add = acc.add_counter
    elif record.kind is RecordKind.HISTOGRAM:
        add = acc.add_histogram
    else:
        add = acc.add_fields
    add(record.name, record.fields, record.tags, record.timestamp)
