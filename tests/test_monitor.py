from __future__ import annotations

import pytest

import monitor
from dropwizard.collector import DropwizardCollector
from dropwizard.config import SAMPLE_CONFIG, Server
from dropwizard.filters import MetricFilter

URL = "http://orders:8081/metrics"


async def test_run_once_prints_line_protocol(capsys, routes_transport) -> None:
    body = b'{"counters":{"requests.total":{"count":42}},"gauges":{"jvm.y":{"value":"\\"ok\\""}}}'
    server = Server(collector=DropwizardCollector("orders", [URL], transport=routes_transport({URL: body})))

    exit_code = await monitor.run([server], once=True)

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert len(lines) == 1
    assert lines[0].startswith("requests.total count=42i ")


async def test_run_once_applies_filters_and_reports_failures(capsys, routes_transport, sample_body: bytes) -> None:
    transport = routes_transport({URL: sample_body})
    collector = DropwizardCollector("orders", [URL, "http://down:8081/metrics"], transport=transport)
    server = Server(collector=collector, metric_filter=MetricFilter(namedrop=["jvm.*", "requests.*"]))

    exit_code = await monitor.run([server], once=True)

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 1
    assert [line.split(" ")[0] for line in lines] == ["response.size"]


def test_sample_config_flag(capsys) -> None:
    monitor.main(["--sample-config"])
    assert capsys.readouterr().out == SAMPLE_CONFIG


def test_missing_config_exits(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(monitor, "configure_logging", lambda verbose=False: None)
    with pytest.raises(SystemExit) as excinfo:
        monitor.main(["-c", str(tmp_path / "missing.yaml")])
    assert excinfo.value.code == 1
