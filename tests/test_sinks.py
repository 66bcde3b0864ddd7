from __future__ import annotations

import io
import math

from dropwizard.base import OutputRecord, RecordKind
from dropwizard.errors import DecodeError, EndpointError
from dropwizard.sinks import LineProtocolPrinter, format_line


def test_format_line_types_and_timestamp() -> None:
    record = OutputRecord(RecordKind.HISTOGRAM, "response.size", {"count": 10, "mean": 1.5}, 1.5)
    assert format_line(record) == "response.size count=10i,mean=1.5 1500000000"


def test_format_line_escapes_names_and_tags() -> None:
    record = OutputRecord(RecordKind.GAUGE, "a b,c", {"value": 1}, 0.0, tags={"host": "x y"})
    assert format_line(record) == "a\\ b\\,c,host=x\\ y value=1i 0"


def test_format_line_skips_non_finite_floats() -> None:
    only_nan = OutputRecord(RecordKind.GAUGE, "g", {"value": math.nan}, 0.0)
    assert format_line(only_nan) is None
    mixed = OutputRecord(RecordKind.FIELDS, "t", {"max": math.inf, "count": 2}, 0.0)
    assert format_line(mixed) == "t count=2i 0"


def test_printer_writes_one_line_per_record() -> None:
    out = io.StringIO()
    printer = LineProtocolPrinter(out)
    printer.add_counter("requests.total", {"count": 42}, None, 2.0)
    printer.add_gauge("jvm.threads.load", {"value": 0.75}, None, 2.0)
    printer.add_error(EndpointError("http://a/metrics", DecodeError("bad")))

    assert out.getvalue().splitlines() == [
        "requests.total count=42i 2000000000",
        "jvm.threads.load value=0.75 2000000000",
    ]
    assert printer.records == []
    assert len(printer.errors) == 1
