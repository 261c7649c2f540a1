"""Shared fixtures: in-memory sinks, recording handlers, and runtime reset."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from io import StringIO
from typing import Any

import pytest

from lib_log_fabric import config as log_config
from lib_log_fabric import runtime
from lib_log_fabric.adapters import BaselineHandler, ConsoleWriter
from lib_log_fabric.domain import LogLevel, LogRecord
from tests.doubles import FIXED_NS, PushRecorder, RecordingHandler, RecordingWriter


@pytest.fixture
def fixed_ns() -> int:
    return FIXED_NS


@pytest.fixture
def make_record() -> Callable[..., LogRecord]:
    def factory(level: LogLevel | str = LogLevel.INFO, message: str = "hello", **attributes: Any) -> LogRecord:
        return LogRecord(FIXED_NS, level, message, attributes)

    return factory


@pytest.fixture
def recording_writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def console_stream() -> StringIO:
    return StringIO()


@pytest.fixture
def console_baseline(console_stream: StringIO) -> BaselineHandler:
    return BaselineHandler([ConsoleWriter(stream=console_stream)], level=LogLevel.DEBUG)


@pytest.fixture
def push_recorder() -> PushRecorder:
    return PushRecorder()


@pytest.fixture(autouse=True)
def reset_runtime() -> Iterator[None]:
    """Tear down any runtime a test installed."""

    yield
    runtime.shutdown()


@pytest.fixture(autouse=True)
def reset_dotenv_state() -> Iterator[None]:
    log_config._reset_dotenv_state_for_testing()
    yield
    log_config._reset_dotenv_state_for_testing()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every variable the configuration layer reads."""

    for name in (
        "SERVICE_NAME",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
        "OTEL_EXPORTER_OTLP_HEADERS",
        "LOKI_URL",
        "LOKI_LABELS",
        "SYSLOG_ADDRESS",
        "SYSLOG_NETWORK",
        "SYSLOG_TAG",
        "LOG_FILE_PATH",
        "LOG_FILE_MAX_SIZE_MB",
        "LOG_FILE_MAX_BACKUPS",
        "LOG_FILE_MAX_AGE_DAYS",
        "LOG_FILE_COMPRESS",
        "LOG_FILE_MIRROR_CONSOLE",
        "LOG_DISPATCH_QUEUE_SIZE",
        "LOG_DISPATCH_WORKERS",
        "LOG_PUSH_TIMEOUT",
        "LOG_PUSH_VERIFY",
        "LOG_FORCE_COLOR",
        "LOG_NO_COLOR",
        log_config.DOTENV_ENV_VAR,
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
