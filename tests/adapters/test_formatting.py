from __future__ import annotations

import json

import pytest

from lib_log_fabric.adapters._formatting import render_json, render_line, render_text
from lib_log_fabric.domain import LogLevel, LogRecord
from tests.doubles import FIXED_NS
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def record(message: str = "ready", level: LogLevel = LogLevel.INFO) -> LogRecord:
    return LogRecord(FIXED_NS, level, message)


def test_text_line_carries_core_fields_then_attributes() -> None:
    line = render_text(record(), [("svc", "api"), ("ok", False), ("ratio", 0.5)])

    assert line == "time=2025-09-30T12:00:00.000Z level=INFO msg=ready svc=api ok=false ratio=0.5"


@pytest.mark.parametrize(
    "value, rendered",
    [
        ("two words", '"two words"'),
        ("", '""'),
        ('say "hi"', '"say \\"hi\\""'),
        ("a=b", '"a=b"'),
        ("line\nbreak", '"line\\nbreak"'),
        ("plain", "plain"),
    ],
)
def test_text_values_are_quoted_when_needed(value: str, rendered: str) -> None:
    assert render_text(record(), [("k", value)]).endswith(f" k={rendered}")


def test_reserved_attribute_keys_do_not_shadow_core_fields() -> None:
    line = render_text(record(), [("msg", "spoof"), ("level", "ERROR")])

    assert "msg=ready" in line
    assert line.endswith("extra_msg=spoof extra_level=ERROR")


def test_json_line_is_a_single_object() -> None:
    line = render_json(record("héllo", LogLevel.WARN), [("n", 1), ("flag", True)])

    assert "\n" not in line
    assert json.loads(line) == {
        "time": "2025-09-30T12:00:00.000Z",
        "level": "WARN",
        "msg": "héllo",
        "n": 1,
        "flag": True,
    }


def test_render_line_dispatches_on_format() -> None:
    assert render_line(record(), [], "json").startswith("{")
    assert render_line(record(), [], "text").startswith("time=")
