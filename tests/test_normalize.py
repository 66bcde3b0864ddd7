from __future__ import annotations

from dropwizard.base import RecordKind
from dropwizard.normalize import HISTOGRAM_FIELDS, METER_FIELDS, TIMER_FIELDS, emit, normalize
from dropwizard.schema import MetricsDocument, decode_document
from dropwizard.sinks import MemoryAccumulator

NOW = 1_700_000_000.0


def _records(body: str | bytes) -> list:
    return list(normalize(decode_document(body), NOW))


def test_counter_scenario() -> None:
    records = _records('{"counters":{"requests.total":{"count":42}}}')
    assert len(records) == 1
    assert records[0].name == "requests.total"
    assert records[0].kind is RecordKind.COUNTER
    assert records[0].fields == {"count": 42}
    assert records[0].tags is None


def test_quoted_float_gauge_scenario() -> None:
    records = _records('{"gauges":{"jvm.x":{"value":"3.14"}}}')
    assert [(r.name, r.fields) for r in records] == [("jvm.x", {"value": 3.14})]
    assert isinstance(records[0].fields["value"], float)


def test_text_gauge_is_dropped() -> None:
    assert _records('{"gauges":{"jvm.y":{"value":"\\"ok\\""}}}') == []


def test_record_count_and_field_tables(sample_body: bytes) -> None:
    records = _records(sample_body)
    by_name = {r.name: r for r in records}

    # two numeric gauges + counter + histogram + meter + timer
    assert len(records) == 6
    assert "jvm.attribute.name" not in by_name

    assert by_name["jvm.memory.total.used"].fields == {"value": 123456789}
    assert by_name["jvm.threads.load"].fields == {"value": 0.75}
    assert set(by_name["response.size"].fields) == set(HISTOGRAM_FIELDS)
    assert set(by_name["requests.rate"].fields) == set(METER_FIELDS)
    assert set(by_name["requests.latency"].fields) == set(TIMER_FIELDS)
    assert by_name["requests.latency"].fields["m5_rate"] == 4.0
    assert by_name["response.size"].fields["p999"] == 510.0


def test_record_channels(sample_body: bytes) -> None:
    kinds = {r.name: r.kind for r in _records(sample_body)}
    assert kinds["jvm.threads.load"] is RecordKind.GAUGE
    assert kinds["requests.total"] is RecordKind.COUNTER
    assert kinds["response.size"] is RecordKind.HISTOGRAM
    assert kinds["requests.rate"] is RecordKind.HISTOGRAM
    assert kinds["requests.latency"] is RecordKind.FIELDS


def test_unit_fields_are_not_emitted(sample_body: bytes) -> None:
    for record in _records(sample_body):
        assert "units" not in record.fields
        assert "duration_units" not in record.fields
        assert "rate_units" not in record.fields


def test_all_records_share_the_timestamp(sample_body: bytes) -> None:
    assert {r.timestamp for r in _records(sample_body)} == {NOW}


def test_same_name_in_two_kinds_gives_two_records() -> None:
    records = _records('{"counters":{"x":{"count":1}},"meters":{"x":{"count":2}}}')
    assert sorted(r.kind.value for r in records) == ["counter", "histogram"]


def test_empty_document_yields_nothing() -> None:
    assert list(normalize(MetricsDocument(), NOW)) == []


def test_emit_routes_by_kind(sample_body: bytes) -> None:
    acc = MemoryAccumulator()
    for record in normalize(decode_document(sample_body), NOW):
        emit(acc, record)

    assert len(acc.records) == 6
    assert acc.find("requests.rate")[0].kind is RecordKind.HISTOGRAM
    assert acc.find("requests.latency")[0].kind is RecordKind.FIELDS


def test_non_finite_text_gauges_are_dropped() -> None:
    assert _records('{"gauges":{"g":{"value":"NaN"},"h":{"value":"Infinity"},"i":{"value":"-Infinity"}}}') == []
