"""Runtime state container and access helpers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from threading import RLock

from lib_log_fabric.application.ports import ClockPort, HandlerPort
from lib_log_fabric.domain import LogLevel, SetupError


@dataclass(slots=True)
class LoggingRuntime:
    """Aggregate of live collaborators assembled by the composition root."""

    handler: HandlerPort
    backend: str
    service: str
    level: LogLevel
    failures: tuple[SetupError, ...]
    clock: ClockPort
    shutdown: Callable[[], bool]


_STATE: LoggingRuntime | None = None
_STATE_LOCK = RLock()


def set_runtime(runtime: LoggingRuntime) -> None:
    """Install ``runtime`` as the active singleton; refuse a second install."""

    with _STATE_LOCK:
        global _STATE
        if _STATE is not None:
            raise RuntimeError("lib_log_fabric.init() cannot be called twice without shutdown(); call lib_log_fabric.shutdown() first")
        _STATE = runtime


def clear_runtime() -> LoggingRuntime | None:
    """Remove and return the active runtime if present."""

    with _STATE_LOCK:
        global _STATE
        runtime, _STATE = _STATE, None
        return runtime


def current_runtime() -> LoggingRuntime:
    """Return the active runtime or raise when uninitialised."""

    with _STATE_LOCK:
        if _STATE is None:
            raise RuntimeError("lib_log_fabric.init() must be called before using the logging API")
        return _STATE


def is_initialised() -> bool:
    """Return ``True`` when :func:`lib_log_fabric.init` has been called."""

    with _STATE_LOCK:
        return _STATE is not None


__all__ = [
    "LoggingRuntime",
    "clear_runtime",
    "current_runtime",
    "is_initialised",
    "set_runtime",
]
