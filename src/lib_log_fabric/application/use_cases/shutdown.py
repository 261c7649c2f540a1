"""Shutdown orchestration for the active handler.

Purpose
-------
Close the installed handler (draining push dispatchers, closing sockets and
files) without letting a close failure abort process exit.
"""

from __future__ import annotations

from collections.abc import Callable

from lib_log_fabric.application.ports.handler import HandlerPort
from lib_log_fabric.domain.errors import CloseError


def create_shutdown(
    handler: HandlerPort,
    *,
    report: Callable[[CloseError], None],
) -> Callable[[], bool]:
    """Return a callable that closes ``handler`` once.

    The callable returns ``True`` on a clean close and ``False`` when a
    :class:`CloseError` was passed to ``report``.
    """

    def shutdown() -> bool:
        try:
            handler.close()
        except CloseError as exc:
            report(exc)
            return False
        return True

    return shutdown


__all__ = ["create_shutdown"]
