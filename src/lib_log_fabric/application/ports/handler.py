"""Handler capability contract implemented by every sink.

Purpose
-------
Define the narrow surface the logger façade and the setup orchestrator rely
on, so baseline, syslog, Loki, and OTLP handlers stay interchangeable.

Contents
--------
* :class:`HandlerPort` - runtime-checkable protocol.

System Role
-----------
The only abstraction callers see; priority-chain position and transport
details stay hidden behind it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from lib_log_fabric.domain.levels import LogLevel
from lib_log_fabric.domain.records import LogRecord


@runtime_checkable
class HandlerPort(Protocol):
    """Accept log records and deliver them to a backend.

    Examples
    --------
    >>> class Recorder:
    ...     def enabled(self, level): return True
    ...     def emit(self, record): pass
    ...     def with_attributes(self, extra): return self
    ...     def with_group(self, name): return self
    ...     def close(self): pass
    >>> isinstance(Recorder(), HandlerPort)
    True
    """

    def enabled(self, level: LogLevel) -> bool:
        """Return ``True`` when records at ``level`` would be emitted."""

    def emit(self, record: LogRecord) -> None:
        """Deliver ``record``; raise :class:`EmitError` when a synchronous leg fails."""

    def with_attributes(self, extra: Mapping[str, Any]) -> "HandlerPort":
        """Return a new handler carrying ``extra`` in addition to its attributes."""

    def with_group(self, name: str) -> "HandlerPort":
        """Return a new handler that prefixes subsequent attribute keys with ``name.``."""

    def close(self) -> None:
        """Release held resources; safe to call repeatedly."""


__all__ = ["HandlerPort"]
