"""Adapter implementations for the emission fabric ports.

Purpose
-------
Collect the concrete sinks (baseline writers, syslog, Loki, OTLP) and the
background dispatcher so the composition root imports them from one place.
"""

from __future__ import annotations

from .baseline import BaselineHandler
from .dispatch import BackgroundDispatcher, DispatchStats
from .remote import (
    LokiHandler,
    OtlpHandler,
    SyslogHandler,
    SyslogTransport,
    create_loki_handler,
    create_otlp_handler,
    create_syslog_handler,
)
from .writers import ConsoleWriter, RotatingFileWriter

__all__ = [
    "BackgroundDispatcher",
    "BaselineHandler",
    "ConsoleWriter",
    "DispatchStats",
    "LokiHandler",
    "OtlpHandler",
    "RotatingFileWriter",
    "SyslogHandler",
    "SyslogTransport",
    "create_loki_handler",
    "create_otlp_handler",
    "create_syslog_handler",
]
