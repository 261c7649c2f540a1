from __future__ import annotations

import dataclasses
import time
from datetime import datetime, timezone

import pytest

from lib_log_fabric.domain import LogLevel, LogRecord
from tests.doubles import FIXED_NS
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_construction_coerces_fields() -> None:
    record = LogRecord(FIXED_NS, "warning", 123, {"obj": None, "nested": {"n": 1}}, groups=("g", ""))  # type: ignore[arg-type]

    assert record.level is LogLevel.WARN
    assert record.message == "123"
    assert record.attributes["obj"] == "None"
    assert dict(record.attributes["nested"]) == {"n": 1}
    assert record.groups == ("g",)


def test_records_are_immutable() -> None:
    record = LogRecord(FIXED_NS, LogLevel.INFO, "hello", {"a": 1})

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.message = "changed"  # type: ignore[misc]
    with pytest.raises(TypeError):
        record.attributes["a"] = 2  # type: ignore[index]


def test_replace_returns_a_modified_copy() -> None:
    record = LogRecord(FIXED_NS, LogLevel.INFO, "hello")
    louder = record.replace(level="error")

    assert louder.level is LogLevel.ERROR
    assert record.level is LogLevel.INFO


def test_now_uses_wall_clock() -> None:
    before = time.time_ns()
    record = LogRecord.now(LogLevel.DEBUG, "tick", {"n": 1})
    after = time.time_ns()

    assert before <= record.timestamp_ns <= after
    assert record.attributes["n"] == 1


def test_timestamp_helpers() -> None:
    record = LogRecord(FIXED_NS + 801_456_789, LogLevel.INFO, "x")

    assert record.timestamp.tzinfo is timezone.utc
    assert record.timestamp.replace(microsecond=0) == datetime(2025, 9, 30, 12, 0, 0, tzinfo=timezone.utc)
    assert record.iso_timestamp() == "2025-09-30T12:00:00.801Z"
