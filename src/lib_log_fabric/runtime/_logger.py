"""Logger façade building records for a handler.

Purpose
-------
Give callers the familiar ``debug``/``info``/``warn``/``error`` surface while
keeping handlers free of convenience logic.

Contents
--------
* :class:`Logger` - immutable front end around one :class:`HandlerPort`.
"""

from __future__ import annotations

from typing import Any

from lib_log_fabric.application.ports import ClockPort, HandlerPort
from lib_log_fabric.domain import LogLevel, LogRecord


class Logger:
    """Emit records through ``handler``.

    ``bind`` and ``group`` return new loggers over derived handlers; the
    original logger keeps its attributes. :class:`EmitError` from the handler
    propagates to the caller.

    Examples
    --------
    >>> from io import StringIO
    >>> from lib_log_fabric.adapters import BaselineHandler, ConsoleWriter
    >>> class FixedClock:
    ...     def now_ns(self): return 1_759_233_600_000_000_000
    >>> buffer = StringIO()
    >>> logger = Logger(BaselineHandler([ConsoleWriter(stream=buffer)]), clock=FixedClock())
    >>> logger.bind(order_id=42).group("http").warn("stock low", status=503)
    >>> buffer.getvalue()
    'time=2025-09-30T12:00:00.000Z level=WARN msg="stock low" order_id=42 http.status=503\\n'
    """

    __slots__ = ("_handler", "_clock")

    def __init__(self, handler: HandlerPort, *, clock: ClockPort | None = None) -> None:
        self._handler = handler
        self._clock = clock

    @property
    def handler(self) -> HandlerPort:
        return self._handler

    def enabled(self, level: LogLevel | str | int) -> bool:
        return self._handler.enabled(LogLevel.coerce(level))

    def log(self, level: LogLevel | str | int, message: str, **attributes: Any) -> None:
        """Emit ``message`` at ``level`` when the handler accepts that level."""
        resolved = LogLevel.coerce(level)
        if not self._handler.enabled(resolved):
            return
        if self._clock is None:
            record = LogRecord.now(resolved, message, attributes)
        else:
            record = LogRecord(self._clock.now_ns(), resolved, message, attributes)
        self._handler.emit(record)

    def debug(self, message: str, **attributes: Any) -> None:
        self.log(LogLevel.DEBUG, message, **attributes)

    def info(self, message: str, **attributes: Any) -> None:
        self.log(LogLevel.INFO, message, **attributes)

    def warn(self, message: str, **attributes: Any) -> None:
        self.log(LogLevel.WARN, message, **attributes)

    warning = warn

    def error(self, message: str, **attributes: Any) -> None:
        self.log(LogLevel.ERROR, message, **attributes)

    def bind(self, **attributes: Any) -> "Logger":
        """Return a logger whose handler carries ``attributes`` on every record."""
        return Logger(self._handler.with_attributes(attributes), clock=self._clock)

    def group(self, name: str) -> "Logger":
        """Return a logger prefixing later attribute keys with ``name.``."""
        return Logger(self._handler.with_group(name), clock=self._clock)


__all__ = ["Logger"]
