"""Port for byte-stream destinations used by the baseline sink."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_fabric.domain.levels import LogLevel


@runtime_checkable
class LineWriterPort(Protocol):
    """Append complete lines to a local stream without interleaving."""

    def write_line(self, line: str, level: LogLevel) -> None:
        """Write ``line`` plus a terminating newline atomically."""

    def close(self) -> None:
        """Release the underlying stream; safe to call repeatedly."""


__all__ = ["LineWriterPort"]
