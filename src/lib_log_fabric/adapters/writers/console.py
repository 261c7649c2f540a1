"""Rich-powered console writer implementing :class:`LineWriterPort`.

Purpose
-------
Print baseline lines to standard output (or any text stream) through Rich,
optionally tinting each line by severity when the terminal supports colour.

Contents
--------
* :data:`_STYLE_MAP` - default level-to-style mapping.
* :class:`ConsoleWriter` - the writer used by console baselines.

System Role
-----------
Terminal fallback of the setup chain and the default baseline embedded in
every remote handler. Markup, emoji, and highlighting are disabled so the
printed text is exactly the rendered line.
"""

from __future__ import annotations

import threading
from typing import Mapping, MutableMapping, TextIO

from rich.console import Console

from lib_log_fabric.application.ports.writer import LineWriterPort
from lib_log_fabric.domain.errors import EmitError
from lib_log_fabric.domain.levels import LogLevel


_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "cyan",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
}

#: Default Rich styles keyed by :class:`LogLevel`.


class ConsoleWriter(LineWriterPort):
    """Write one line per record to a Rich console.

    Examples
    --------
    >>> from io import StringIO
    >>> buffer = StringIO()
    >>> writer = ConsoleWriter(stream=buffer)
    >>> writer.write_line("time=now level=INFO msg=[ok]", LogLevel.INFO)
    >>> buffer.getvalue()
    'time=now level=INFO msg=[ok]\\n'
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        stream: TextIO | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: MutableMapping[LogLevel | str, str] | None = None,
    ) -> None:
        """Configure the writer with an optional console, stream, and style overrides."""
        if console is not None:
            self._console = console
        else:
            self._console = Console(file=stream, force_terminal=force_color, no_color=no_color, highlight=False)
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = LogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged
        self._lock = threading.Lock()

    @property
    def console(self) -> Console:
        return self._console

    def write_line(self, line: str, level: LogLevel) -> None:
        """Print ``line`` with the level style when colour is active.

        Raises
        ------
        EmitError
            When the underlying stream is closed, detached, or fails to write.
        """
        style = "" if self._no_color else self._style_map.get(level, "")
        with self._lock:
            try:
                self._console.print(
                    line,
                    style=style,
                    markup=False,
                    emoji=False,
                    highlight=False,
                    soft_wrap=True,
                )
            except (OSError, ValueError) as exc:
                raise EmitError(f"console write failed: {exc}") from exc

    def close(self) -> None:
        """Flush the console stream; the stream itself stays open."""
        with self._lock:
            stream = self._console.file
            flush = getattr(stream, "flush", None)
            if flush is not None:
                flush()


__all__ = ["ConsoleWriter"]
