"""Port describing background dispatch of remote delivery jobs."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class DispatchPort(Protocol):
    """Run delivery jobs off the caller's thread."""

    def submit(self, job: Callable[[], None]) -> bool:
        """Schedule ``job`` without blocking; return ``False`` when it was dropped."""

    def close(self, timeout: float | None = None) -> None:
        """Stop accepting jobs and wait up to ``timeout`` for queued ones."""


__all__ = ["DispatchPort"]
