"""Port for the clock that stamps records."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Provide the current Unix time in nanoseconds."""

    def now_ns(self) -> int: ...


__all__ = ["ClockPort"]
