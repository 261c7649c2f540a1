"""Line renderers shared by every sink.

Why
---
The baseline sink, the syslog transport, and the Loki push all carry the same
self-contained line. Rendering it in one place keeps the sinks byte-identical
for a given record.

Contents
--------
* :func:`render_text` - logfmt line (``time=... level=... msg=... key=value``).
* :func:`render_json` - single-line JSON object with the same fields.
* :func:`render_line` - dispatch on the configured line format.

System Role
-----------
Bridges :class:`LogRecord` plus a resolved attribute list into the strings the
writers and transports put on the wire.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from lib_log_fabric.domain.attributes import Scalar, stringify
from lib_log_fabric.domain.levels import severity_text
from lib_log_fabric.domain.records import LogRecord

LINE_FORMATS = ("text", "json")

_RESERVED_KEYS = frozenset({"time", "level", "msg"})
#: Core fields an attribute may not overwrite; clashing keys gain an ``extra_`` prefix.

_NEEDS_QUOTING = frozenset(' "=\\')


def _field_key(key: str) -> str:
    return f"extra_{key}" if key in _RESERVED_KEYS else key


def _logfmt(text: str) -> str:
    """Quote ``text`` when a logfmt reader would otherwise mis-split it.

    Examples
    --------
    >>> _logfmt("plain"), _logfmt("two words"), _logfmt("")
    ('plain', '"two words"', '""')
    """
    if not text or not text.isprintable() or any(char in _NEEDS_QUOTING for char in text):
        return json.dumps(text, ensure_ascii=False)
    return text


def render_text(record: LogRecord, attributes: Sequence[tuple[str, Scalar]]) -> str:
    """Return the logfmt line for ``record``.

    Examples
    --------
    >>> record = LogRecord(1_759_233_600_000_000_000, "warn", "stock low")
    >>> render_text(record, [("order_id", 42), ("rush", True)])
    'time=2025-09-30T12:00:00.000Z level=WARN msg="stock low" order_id=42 rush=true'
    """
    parts = [
        f"time={record.iso_timestamp()}",
        f"level={severity_text(record.level)}",
        f"msg={_logfmt(record.message)}",
    ]
    parts.extend(f"{_logfmt(_field_key(key))}={_logfmt(stringify(value))}" for key, value in attributes)
    return " ".join(parts)


def render_json(record: LogRecord, attributes: Sequence[tuple[str, Scalar]]) -> str:
    """Return the single-line JSON object for ``record``."""

    payload: dict[str, Scalar] = {
        "time": record.iso_timestamp(),
        "level": severity_text(record.level),
        "msg": record.message,
    }
    for key, value in attributes:
        payload[_field_key(key)] = value
    return json.dumps(payload, ensure_ascii=False)


def render_line(record: LogRecord, attributes: Sequence[tuple[str, Scalar]], line_format: str = "text") -> str:
    """Render ``record`` in ``line_format`` (``text`` or ``json``)."""

    if line_format == "json":
        return render_json(record, attributes)
    return render_text(record, attributes)


__all__ = ["LINE_FORMATS", "render_json", "render_line", "render_text"]
