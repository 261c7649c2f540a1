"""Baseline sink: the always-reachable local handler.

Purpose
-------
Render each record once and append it to one or more local writers (console,
rotating file). Used on its own for the ``console`` and ``file`` backends and
embedded in every remote handler as the durable fallback.

Contents
--------
* :class:`BaselineHandler` - :class:`HandlerPort` implementation.

System Role
-----------
Carries the :class:`HandlerContext` (bound attributes and groups) for the
whole handler family; remote handlers derive their context through the
baseline they own.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from lib_log_fabric.application.ports.handler import HandlerPort
from lib_log_fabric.application.ports.writer import LineWriterPort
from lib_log_fabric.domain.attributes import Scalar
from lib_log_fabric.domain.context import HandlerContext
from lib_log_fabric.domain.errors import CloseError, EmitError
from lib_log_fabric.domain.levels import LogLevel
from lib_log_fabric.domain.records import LogRecord

from ._formatting import LINE_FORMATS, render_line


class BaselineHandler(HandlerPort):
    """Synchronously write records to local writers.

    Examples
    --------
    >>> from io import StringIO
    >>> from lib_log_fabric.adapters.writers import ConsoleWriter
    >>> buffer = StringIO()
    >>> handler = BaselineHandler([ConsoleWriter(stream=buffer)]).with_attributes({"svc": "api"})
    >>> handler.emit(LogRecord(1_759_233_600_000_000_000, "info", "ready", {"port": 8080}))
    >>> buffer.getvalue()
    'time=2025-09-30T12:00:00.000Z level=INFO msg=ready svc=api port=8080\\n'
    """

    def __init__(
        self,
        writers: Sequence[LineWriterPort],
        *,
        level: LogLevel | str | int = LogLevel.INFO,
        line_format: str = "text",
        context: HandlerContext | None = None,
    ) -> None:
        """Bind the writers, threshold, line format, and attribute context."""
        if not writers:
            raise ValueError("BaselineHandler needs at least one writer")
        if line_format not in LINE_FORMATS:
            raise ValueError(f"line_format must be one of {', '.join(LINE_FORMATS)}")
        self._writers = tuple(writers)
        self._level = LogLevel.coerce(level)
        self._line_format = line_format
        self._context = context or HandlerContext()

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def context(self) -> HandlerContext:
        return self._context

    @property
    def writers(self) -> tuple[LineWriterPort, ...]:
        return self._writers

    def enabled(self, level: LogLevel) -> bool:
        return isinstance(level, LogLevel) and level.value >= self._level.value

    def emit(self, record: LogRecord) -> None:
        """Render and write ``record`` when it passes the level filter."""
        if not self.enabled(record.level):
            return
        self.write_line(self.render(record), record.level)

    def resolve(self, record: LogRecord) -> list[tuple[str, Scalar]]:
        """Return the attribute pairs rendered for ``record`` under this context."""
        return self._context.resolve(record)

    def render(self, record: LogRecord) -> str:
        """Return the structured line for ``record`` without writing it."""
        return render_line(record, self.resolve(record), self._line_format)

    def write_line(self, line: str, level: LogLevel) -> None:
        """Append an already rendered line to every writer.

        Raises
        ------
        EmitError
            When any writer fails; remaining writers still receive the line.
        """
        failures: list[BaseException] = []
        for writer in self._writers:
            try:
                writer.write_line(line, level)
            except (EmitError, OSError) as exc:
                failures.append(exc)
        if failures:
            raise EmitError(f"baseline write failed: {failures[0]}") from failures[0]

    def with_attributes(self, extra: Mapping[str, Any]) -> "BaselineHandler":
        return self._derive(self._context.with_attributes(extra))

    def with_group(self, name: str) -> "BaselineHandler":
        return self._derive(self._context.with_group(name))

    def close(self) -> None:
        """Close every writer; report the first failure after trying all."""
        failures: list[BaseException] = []
        for writer in self._writers:
            try:
                writer.close()
            except (CloseError, OSError) as exc:
                failures.append(exc)
        if failures:
            raise CloseError(f"baseline close failed: {failures[0]}") from failures[0]

    def _derive(self, context: HandlerContext) -> "BaselineHandler":
        return BaselineHandler(self._writers, level=self._level, line_format=self._line_format, context=context)


__all__ = ["BaselineHandler"]
