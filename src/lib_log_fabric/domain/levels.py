"""Log level abstraction and backend severity mapping.

Purpose
-------
Offer a domain-specific representation of log severities together with the
pure translations each backend needs (syslog priorities, OTLP severity
numbers).

Contents
--------
* :class:`LogLevel` enum with conversion helpers.
* :func:`syslog_severity` / :func:`otlp_severity` / :func:`severity_text` -
  total mapping functions with documented defaults.

System Role
-----------
Used by the records, the baseline formatter, and every remote adapter so
severity handling stays consistent across sinks.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class LogLevel(Enum):
    """Enumerated logging levels ordered ``DEBUG < INFO < WARN < ERROR``."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Resolve ``name`` case-insensitively; ``warning`` is accepted as an alias.

        Examples
        --------
        >>> LogLevel.from_name("warning")
        <LogLevel.WARN: 30>
        >>> LogLevel.from_name(" Error ")
        <LogLevel.ERROR: 40>
        """
        normalized = name.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_numeric(cls, level: int) -> "LogLevel":
        """Return the :class:`LogLevel` corresponding to ``level``."""
        try:
            return cls(level)
        except ValueError as exc:
            raise ValueError(f"Unsupported log level numeric: {level}") from exc

    @classmethod
    def coerce(cls, value: "LogLevel | str | int") -> "LogLevel":
        """Accept enum members, names, or numeric values."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, str):
            return cls.from_name(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_numeric(value)
        raise TypeError(f"Cannot interpret {value!r} as a log level")


_ALIASES = {"WARNING": "WARN", "ERR": "ERROR"}

SYSLOG_DEFAULT_SEVERITY = 6
OTLP_DEFAULT_SEVERITY = 9

_SYSLOG_SEVERITY = {
    LogLevel.DEBUG: 7,
    LogLevel.INFO: 6,
    LogLevel.WARN: 4,
    LogLevel.ERROR: 3,
}
#: Map :class:`LogLevel` to RFC 5424 severities (DEBUG, INFO, WARNING, ERR).

_OTLP_SEVERITY = {
    LogLevel.DEBUG: 5,
    LogLevel.INFO: 9,
    LogLevel.WARN: 13,
    LogLevel.ERROR: 17,
}
#: Map :class:`LogLevel` to OpenTelemetry ``SeverityNumber`` values.


def _lookup(table: dict[LogLevel, int], level: Any, default: int) -> int:
    if isinstance(level, LogLevel):
        return table.get(level, default)
    return default


def syslog_severity(level: Any) -> int:
    """Return the syslog severity for ``level``; unknown input maps to INFO (6).

    Examples
    --------
    >>> syslog_severity(LogLevel.WARN)
    4
    >>> syslog_severity("verbose")
    6
    """
    return _lookup(_SYSLOG_SEVERITY, level, SYSLOG_DEFAULT_SEVERITY)


def otlp_severity(level: Any) -> int:
    """Return the OTLP severity number for ``level``; unknown input maps to 9.

    Examples
    --------
    >>> otlp_severity(LogLevel.ERROR)
    17
    >>> otlp_severity(99)
    9
    """
    return _lookup(_OTLP_SEVERITY, level, OTLP_DEFAULT_SEVERITY)


def severity_text(level: Any) -> str:
    """Return the upper-case level name rendered in lines and OTLP payloads."""
    if isinstance(level, LogLevel):
        return level.name
    return LogLevel.INFO.name


__all__ = [
    "LogLevel",
    "OTLP_DEFAULT_SEVERITY",
    "SYSLOG_DEFAULT_SEVERITY",
    "otlp_severity",
    "severity_text",
    "syslog_severity",
]
