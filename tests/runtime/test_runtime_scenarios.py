"""End-to-end runs of the priority chain through ``init``."""

from __future__ import annotations

import json
import socket
from io import StringIO
from pathlib import Path

import httpx
import pytest

import lib_log_fabric
from lib_log_fabric import FabricSettings, FileSettings, LogLevel, LokiSettings, OtlpSettings, SyslogSettings
from lib_log_fabric.adapters import SyslogTransport
from tests.doubles import PushRecorder
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


@pytest.fixture
def udp_collector():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def _address(sock: socket.socket) -> str:
    host, port = sock.getsockname()
    return f"{host}:{port}"


def _receive(sock: socket.socket) -> str:
    data, _ = sock.recvfrom(65535)
    return data.decode("utf-8")


def test_syslog_only_delivers_to_collector_and_console(udp_collector: socket.socket) -> None:
    stream = StringIO()
    settings = FabricSettings(service="orders", syslog=SyslogSettings("udp", _address(udp_collector), tag="orders"))

    backend = lib_log_fabric.init(settings, stream=stream)
    lib_log_fabric.get().warn("order delayed", order_id=42)
    lib_log_fabric.shutdown()

    assert backend == "syslog"
    announcement, frame = _receive(udp_collector), _receive(udp_collector)
    assert "Using syslog logging" in announcement
    assert frame.startswith("<132>")
    assert " orders[" in frame
    assert frame.endswith('msg="order delayed" order_id=42\n')
    assert 'level=WARN msg="order delayed" order_id=42' in stream.getvalue()


def test_otlp_wins_over_syslog(udp_collector: socket.socket) -> None:
    recorder = PushRecorder()
    settings = FabricSettings(
        service="orders",
        otlp=OtlpSettings("collector:4318"),
        syslog=SyslogSettings("udp", _address(udp_collector)),
    )

    backend = lib_log_fabric.init(settings, stream=StringIO(), http_transport=recorder.transport)
    lib_log_fabric.get().info("stock low", sku="A-1")
    lib_log_fabric.shutdown()

    assert backend == "otlp"
    exported = [
        body["resourceLogs"][0]["scopeLogs"][0]["logRecords"][0] for body in recorder.data_bodies("resourceLogs")
    ]
    assert [entry["body"]["stringValue"] for entry in exported] == ["Using otlp logging", "stock low"]
    assert (exported[1]["severityNumber"], exported[1]["severityText"]) == (9, "INFO")
    assert exported[1]["attributes"] == [{"key": "sku", "value": {"stringValue": "A-1"}}]
    assert str(recorder.requests[0].url) == "http://collector:4318/v1/logs"
    udp_collector.settimeout(0.2)
    with pytest.raises(socket.timeout):
        udp_collector.recvfrom(65535)


def test_unreachable_otlp_falls_through_to_loki() -> None:
    received: list[dict] = []

    def route(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/logs":
            raise httpx.ConnectError("connection refused", request=request)
        received.append(json.loads(request.content))
        return httpx.Response(204)

    stream = StringIO()
    settings = FabricSettings(
        service="orders",
        otlp=OtlpSettings("collector:4318"),
        loki=LokiSettings("http://loki:3100", {"env": "test"}),
    )

    backend = lib_log_fabric.init(settings, stream=stream, http_transport=httpx.MockTransport(route))
    lib_log_fabric.get().info("first")
    lib_log_fabric.get().error("second", retry=True)
    failures = lib_log_fabric.inspect_runtime().failures
    lib_log_fabric.shutdown()

    assert backend == "loki"
    assert len(failures) == 1 and failures[0].startswith("otlp")
    console = stream.getvalue()
    assert 'level=WARN msg="otlp logging failed, trying next option"' in console
    assert 'msg="Using loki logging"' in console
    streams = [body["streams"][0] for body in received if body["streams"]]
    entries = [json.loads(stream_["values"][0][1]) for stream_ in streams]
    assert [entry["msg"] for entry in entries] == ["Using loki logging", "first", "second"]
    assert entries[2]["level"] == "ERROR"
    assert entries[2]["retry"] is True
    assert streams[1]["stream"]["service"] == "orders"
    assert streams[1]["stream"]["env"] == "test"


def test_file_backend_writes_rotating_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "app.log"
    stream = StringIO()
    settings = FabricSettings(level=LogLevel.DEBUG, file=FileSettings(log_path, mirror_console=False))

    backend = lib_log_fabric.init(settings, stream=stream)
    lib_log_fabric.get().debug("written", n=1)
    lib_log_fabric.shutdown()

    assert backend == "file"
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines[-1].endswith("level=DEBUG msg=written n=1")
    assert stream.getvalue() == ""


def test_unusable_file_path_falls_back_to_console(tmp_path: Path) -> None:
    blocker = tmp_path / "occupied"
    blocker.write_text("not a directory", encoding="utf-8")
    stream = StringIO()

    backend = lib_log_fabric.init(FabricSettings(file=FileSettings(blocker / "app.log")), stream=stream)

    assert backend == "console"
    assert 'msg="file logging failed, trying next option"' in stream.getvalue()


class RefusingTransport(SyslogTransport):
    def connect(self) -> None:
        return None

    def send(self, severity: int, line: str, timestamp=None) -> None:
        raise ConnectionRefusedError("syslog daemon went away")


def test_init_survives_a_winner_that_refuses_its_announcement() -> None:
    stream = StringIO()
    transport = RefusingTransport(network="udp", address="127.0.0.1:514", tag="orders")

    backend = lib_log_fabric.init(
        FabricSettings(syslog=SyslogSettings("udp", "127.0.0.1:514")),
        stream=stream,
        syslog_transport=transport,
    )

    assert backend == "syslog"
    assert lib_log_fabric.is_initialised()
    assert 'msg="Using syslog logging"' in stream.getvalue()
    assert lib_log_fabric.shutdown() is True
