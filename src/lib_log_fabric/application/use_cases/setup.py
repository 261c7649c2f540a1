"""Priority-chain selection of the active handler.

Purpose
-------
Walk an ordered list of backend candidates, keep the first one whose factory
succeeds, and fall back to the console handler when none does.

Contents
--------
* :class:`BackendCandidate` - named factory plus a display summary.
* :class:`SetupResult` - selected handler, its name, and recorded failures.
* :func:`setup_handler` - the orchestrator.

System Role
-----------
Called by the runtime composition root once per process. Every failed
candidate is announced as a ``WARN`` record through the handler active at
that moment (the console fallback), and the winner announces itself with an
``INFO`` record, so operators can always see which sink is live.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from lib_log_fabric.application.ports.handler import HandlerPort
from lib_log_fabric.domain.errors import EmitError, SetupError
from lib_log_fabric.domain.levels import LogLevel
from lib_log_fabric.domain.records import LogRecord

logger = logging.getLogger(__name__)

CONSOLE_BACKEND = "console"


@dataclass(slots=True, frozen=True)
class BackendCandidate:
    """One rung of the priority chain.

    ``factory`` builds the handler or raises :class:`SetupError`; ``details``
    is a short human-readable description of the target (URL, path, ...).
    """

    name: str
    factory: Callable[[], HandlerPort]
    details: str = ""


@dataclass(slots=True, frozen=True)
class SetupResult:
    """Outcome of :func:`setup_handler`."""

    handler: HandlerPort
    backend: str
    failures: tuple[SetupError, ...] = field(default_factory=tuple)


def _build(candidate: BackendCandidate) -> HandlerPort:
    try:
        return candidate.factory()
    except SetupError:
        raise
    except Exception as exc:
        raise SetupError(candidate.name, str(exc) or type(exc).__name__) from exc


def setup_handler(
    candidates: Sequence[BackendCandidate],
    *,
    fallback: HandlerPort,
    on_selected: Callable[[str, HandlerPort], None] | None = None,
) -> SetupResult:
    """Return the first candidate handler that builds, else ``fallback``.

    Failed candidates are reported through ``fallback`` as
    ``"<name> logging failed, trying next option"`` with an ``error``
    attribute. The fallback is closed when another backend wins. The chain
    always terminates with a handler.

    Examples
    --------
    >>> class Recorder:
    ...     def __init__(self): self.messages = []
    ...     def enabled(self, level): return True
    ...     def emit(self, record): self.messages.append(record.message)
    ...     def with_attributes(self, extra): return self
    ...     def with_group(self, name): return self
    ...     def close(self): pass
    >>> def broken():
    ...     raise SetupError("loki", "connection refused")
    >>> console = Recorder()
    >>> result = setup_handler([BackendCandidate("loki", broken)], fallback=console)
    >>> result.backend, console.messages
    ('console', ['loki logging failed, trying next option', 'Using console logging'])
    """

    failures: list[SetupError] = []
    selected: HandlerPort = fallback
    backend = CONSOLE_BACKEND
    for candidate in candidates:
        try:
            handler = _build(candidate)
        except SetupError as exc:
            failures.append(exc)
            logger.debug("Backend %s unavailable", candidate.name, exc_info=exc)
            _announce(fallback, LogLevel.WARN, f"{candidate.name} logging failed, trying next option", error=str(exc))
            continue
        selected, backend = handler, candidate.name
        break

    if selected is not fallback:
        fallback.close()
    _announce(selected, LogLevel.INFO, f"Using {backend} logging")
    if on_selected is not None:
        on_selected(backend, selected)
    return SetupResult(handler=selected, backend=backend, failures=tuple(failures))


def _announce(handler: HandlerPort, level: LogLevel, message: str, **attributes: str) -> None:
    """Emit a selection notice; a failing sink must not abort the chain."""
    if not handler.enabled(level):
        return
    try:
        handler.emit(LogRecord.now(level, message, attributes))
    except EmitError as exc:
        logger.debug("Announcement %r could not be emitted", message, exc_info=exc)


__all__ = ["BackendCandidate", "CONSOLE_BACKEND", "SetupResult", "setup_handler"]
