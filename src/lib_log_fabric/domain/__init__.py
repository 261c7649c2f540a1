"""Domain entities and value objects used by the emission fabric."""

from __future__ import annotations

from .attributes import AttributeValue, Scalar, coerce_attributes, coerce_value, flatten, stringify
from .context import HandlerContext
from .errors import CloseError, EmitError, LogFabricError, SetupError
from .levels import LogLevel, otlp_severity, severity_text, syslog_severity
from .records import LogRecord

__all__ = [
    "AttributeValue",
    "CloseError",
    "EmitError",
    "HandlerContext",
    "LogFabricError",
    "LogLevel",
    "LogRecord",
    "Scalar",
    "SetupError",
    "coerce_attributes",
    "coerce_value",
    "flatten",
    "otlp_severity",
    "severity_text",
    "stringify",
    "syslog_severity",
]
