from __future__ import annotations

from io import StringIO

import pytest

from lib_log_fabric import __init__conf__
from lib_log_fabric.adapters import BaselineHandler, ConsoleWriter
from lib_log_fabric.adapters.remote.otlp import OtlpHandler, build_otlp_payload, create_otlp_handler, logs_url
from lib_log_fabric.domain import LogLevel, LogRecord, SetupError
from tests.doubles import FIXED_NS, PushRecorder
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def make_handler(recorder: PushRecorder, **kwargs: object) -> OtlpHandler:
    baseline = BaselineHandler([ConsoleWriter(stream=StringIO())], level=LogLevel.DEBUG)
    options: dict[str, object] = {"service_name": "orders", "level": LogLevel.DEBUG, "transport": recorder.transport}
    options.update(kwargs)
    return create_otlp_handler("collector.test:4318", baseline=baseline, **options)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "endpoint, expected",
    [
        ("collector:4318", "http://collector:4318/v1/logs"),
        ("http://collector:4318/", "http://collector:4318/v1/logs"),
        ("https://otel.example", "https://otel.example/v1/logs"),
    ],
)
def test_logs_url(endpoint: str, expected: str) -> None:
    assert logs_url(endpoint) == expected


def test_construction_probes_with_empty_export(push_recorder: PushRecorder) -> None:
    make_handler(push_recorder, headers={"authorization": "Bearer t"}).close()

    request = push_recorder.requests[0]
    assert push_recorder.bodies[0] == {"resourceLogs": []}
    assert str(request.url) == "http://collector.test:4318/v1/logs"
    assert request.headers["authorization"] == "Bearer t"


@pytest.mark.parametrize(
    "level, number",
    [(LogLevel.DEBUG, 5), (LogLevel.INFO, 9), (LogLevel.WARN, 13), (LogLevel.ERROR, 17)],
)
def test_export_body(push_recorder: PushRecorder, level: LogLevel, number: int) -> None:
    handler = make_handler(push_recorder).with_attributes({"svc": "api"})
    handler.emit(LogRecord(FIXED_NS, level, "order created", {"order_id": 42, "rush": True}))
    handler.close()

    bodies = push_recorder.data_bodies("resourceLogs")
    assert len(bodies) == 1
    resource_logs = bodies[0]["resourceLogs"][0]
    assert resource_logs["resource"] == {"attributes": [{"key": "service.name", "value": {"stringValue": "orders"}}]}
    scope_logs = resource_logs["scopeLogs"][0]
    assert scope_logs["scope"] == {"name": __init__conf__.name, "version": __init__conf__.version}
    assert scope_logs["logRecords"] == [
        {
            "timeUnixNano": str(FIXED_NS),
            "severityNumber": number,
            "severityText": level.name,
            "body": {"stringValue": "order created"},
            "attributes": [
                {"key": "svc", "value": {"stringValue": "api"}},
                {"key": "order_id", "value": {"stringValue": "42"}},
                {"key": "rush", "value": {"stringValue": "true"}},
            ],
        }
    ]


def test_records_below_level_are_not_exported(push_recorder: PushRecorder) -> None:
    handler = make_handler(push_recorder, level=LogLevel.WARN)
    handler.emit(LogRecord(FIXED_NS, LogLevel.INFO, "quiet"))
    handler.close()

    assert push_recorder.data_bodies("resourceLogs") == []


def test_unreachable_collector_is_a_setup_error() -> None:
    with pytest.raises(SetupError) as excinfo:
        make_handler(PushRecorder(fail=True))

    assert excinfo.value.backend == "otlp"


def test_verify_off_skips_probe_and_failures_are_swallowed() -> None:
    recorder = PushRecorder(fail=True)
    handler = make_handler(recorder, verify=False)

    handler.emit(LogRecord(FIXED_NS, LogLevel.INFO, "lost"))
    handler.close()

    assert handler.dispatcher.stats.failed == 1  # type: ignore[attr-defined]


def test_build_otlp_payload_unknown_scope() -> None:
    payload = build_otlp_payload(
        LogRecord(FIXED_NS, LogLevel.INFO, "m"),
        [],
        service_name="s",
        scope_name="custom",
        scope_version="9",
    )

    assert payload["resourceLogs"][0]["scopeLogs"][0]["scope"] == {"name": "custom", "version": "9"}
