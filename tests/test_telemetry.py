import io
import json

import pytest

from config import RuntimeConfig
from errors import ErrorCategory, ErrorContext
from recovery.factory import create_structured_error
from telemetry import OtelExporter, RuntimeTelemetry
from telemetry.otel import DEFAULT_SCOPE, DEFAULT_SERVICE_NAME
from tests.tool_harness import make_entry


def _populated() -> RuntimeTelemetry:
    telemetry = RuntimeTelemetry()
    entry = make_entry(version="1.1.0")
    telemetry.record_tool_execution(entry, 0.2, input_bytes=40)
    telemetry.record_tool_execution(entry, 0.4, error=ConnectionError("database connection refused"))
    telemetry.record_retry(
        1,
        create_structured_error(TimeoutError("timed out"), ErrorContext(tool_name="create_invoice")),
    )
    return telemetry


def test_collector_aggregates_usage_by_error_category():
    telemetry = _populated()

    usage = telemetry.usage_for("create_invoice")
    assert (usage.calls, usage.successes, usage.failures) == (2, 1, 1)
    assert usage.mean_duration_ms == pytest.approx(300)
    assert usage.failures_by_category == {ErrorCategory.DEPENDENCY: 1}
    assert telemetry.usage_for("unknown").calls == 0

    failed = telemetry.tool_calls[1]
    assert (failed.error_code, failed.error_category) == ("ERR_5001", "dependency")

    retry = telemetry.retries[0]
    assert (retry.code, retry.category, retry.tool_name) == ("ERR_8001", "timeout", "create_invoice")


def test_failure_messages_are_sanitized():
    telemetry = RuntimeTelemetry()
    telemetry.record_tool_execution(
        make_entry(),
        0.01,
        error=RuntimeError("could not reach postgres://books:secret@db/ledger\ntraceback follows"),
    )
    assert telemetry.tool_calls[0].message == "could not reach [DATABASE_URL_REDACTED]"


def test_retry_callback_records_into_collector():
    telemetry = RuntimeTelemetry()
    callback = telemetry.retry_callback()
    callback(2, create_structured_error(ConnectionError("network unreachable")))
    assert telemetry.retries[0].attempt == 2
    assert telemetry.retries[0].tool_name is None


def test_flush_exports_only_new_events():
    telemetry = _populated()
    exporter = OtelExporter()

    assert telemetry.flush_to_otel(exporter) == 3
    assert telemetry.flush_to_otel(exporter) == 0
    telemetry.record_tool_execution(make_entry(), 0.1)
    assert telemetry.flush_to_otel(exporter) == 1

    records = [json.loads(line) for line in exporter.buffered_payloads()]
    assert [record["event"]["name"] for record in records] == ["tool.call", "tool.call", "tool.retry", "tool.call"]
    assert records[0]["resource"] == {"service.name": DEFAULT_SERVICE_NAME}
    assert records[0]["scope"] == {"name": DEFAULT_SCOPE}
    attributes = records[1]["event"]["attributes"]
    assert attributes["tool.version"] == "1.1.0"
    assert attributes["tool.duration_ms"] == pytest.approx(400)
    assert attributes["error.category"] == "dependency"


def test_exporter_writes_to_sink():
    sink = io.StringIO()
    exporter = OtelExporter(sink=sink, service_name="books", resource={"deployment": "test"})

    written = exporter.export([{"name": "one"}, {"name": "two"}])

    assert written == 2
    lines = sink.getvalue().splitlines()
    assert json.loads(lines[1]) == {
        "resource": {"service.name": "books", "deployment": "test"},
        "scope": {"name": DEFAULT_SCOPE},
        "event": {"name": "two"},
    }
    assert exporter.buffered_payloads() == []


def test_exporter_appends_to_configured_path(tmp_path):
    path = tmp_path / "otel" / "events.jsonl"
    exporter = OtelExporter.from_config(RuntimeConfig(telemetry_log_path=path))

    exporter.export([{"name": "first"}])
    exporter.export([{"name": "second"}])

    names = [json.loads(line)["event"]["name"] for line in path.read_text(encoding="utf-8").splitlines()]
    assert names == ["first", "second"]


def test_exporter_rejects_sink_and_path(tmp_path):
    with pytest.raises(ValueError):
        OtelExporter(sink=io.StringIO(), path=tmp_path / "events.jsonl")


def test_export_nothing_writes_nothing():
    exporter = OtelExporter()
    assert exporter.export([]) == 0
    assert exporter.buffered_payloads() == []
