"""Remote handlers: syslog (inline) plus the Loki and OTLP push handlers."""

from __future__ import annotations

from ._push import PushHandler, PushResources
from .loki import DEFAULT_LABELS, LokiHandler, create_loki_handler
from .otlp import OtlpHandler, create_otlp_handler
from .syslog import SyslogHandler, SyslogTransport, create_syslog_handler

__all__ = [
    "DEFAULT_LABELS",
    "LokiHandler",
    "OtlpHandler",
    "PushHandler",
    "PushResources",
    "SyslogHandler",
    "SyslogTransport",
    "create_loki_handler",
    "create_otlp_handler",
    "create_syslog_handler",
]
