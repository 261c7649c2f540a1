"""Public package surface of the structured-log emission fabric.

Host applications call :func:`init` once at startup, obtain loggers through
:func:`get`, and call :func:`shutdown` before exit. Handlers, settings, and the
error hierarchy are re-exported for explicit wiring and tests.
"""

from __future__ import annotations

from .adapters import BaselineHandler, ConsoleWriter, LokiHandler, OtlpHandler, RotatingFileWriter, SyslogHandler
from .application.ports import HandlerPort
from .application.use_cases import BackendCandidate, SetupResult, setup_handler
from .domain import CloseError, EmitError, LogFabricError, LogLevel, LogRecord, SetupError
from .runtime import Logger, RuntimeSnapshot, current_handler, get, init, inspect_runtime, is_initialised, shutdown
from .settings import DispatchSettings, FabricSettings, FileSettings, LokiSettings, OtlpSettings, SyslogSettings

__all__ = [
    "BackendCandidate",
    "BaselineHandler",
    "CloseError",
    "ConsoleWriter",
    "DispatchSettings",
    "EmitError",
    "FabricSettings",
    "FileSettings",
    "HandlerPort",
    "LogFabricError",
    "LogLevel",
    "LogRecord",
    "Logger",
    "LokiHandler",
    "LokiSettings",
    "OtlpHandler",
    "OtlpSettings",
    "RotatingFileWriter",
    "RuntimeSnapshot",
    "SetupError",
    "SetupResult",
    "SyslogHandler",
    "SyslogSettings",
    "current_handler",
    "get",
    "init",
    "inspect_runtime",
    "is_initialised",
    "setup_handler",
    "shutdown",
]
