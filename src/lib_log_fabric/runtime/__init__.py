"""Runtime façade that installs the active handler once per process.

Purpose
-------
Expose a stable entry point (``init``, ``get``, ``shutdown``) that host
applications use instead of importing the inner layers directly. ``init``
turns configuration into the priority chain and installs the winning handler.

Contents
--------
* :func:`init` - composition root.
* :func:`get` - :class:`Logger` bound to the installed handler.
* :func:`current_handler` / :func:`is_initialised` / :func:`inspect_runtime`.
* :func:`shutdown` - deterministic teardown.

System Role
-----------
The only module holding process-wide state. Code that prefers explicit wiring
can skip it and construct ``Logger(handler)`` directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO

import httpx

from lib_log_fabric.adapters import SyslogTransport
from lib_log_fabric.application.ports import HandlerPort
from lib_log_fabric.config import load_settings
from lib_log_fabric.domain import LogLevel
from lib_log_fabric.settings import FabricSettings

from ._composition import build_candidates, build_console_handler, build_runtime
from ._logger import Logger
from ._state import LoggingRuntime, clear_runtime, current_runtime, is_initialised, set_runtime


@dataclass(slots=True, frozen=True)
class RuntimeSnapshot:
    """Immutable view over the active logging runtime."""

    backend: str
    service: str
    level: LogLevel
    failures: tuple[str, ...]


def init(
    settings: FabricSettings | None = None,
    *,
    stream: TextIO | None = None,
    http_transport: httpx.BaseTransport | None = None,
    syslog_transport: SyslogTransport | None = None,
) -> str:
    """Select and install the active handler; return the backend name.

    Parameters
    ----------
    settings:
        Explicit configuration; read from the environment via
        :func:`lib_log_fabric.config.load_settings` when omitted.
    stream:
        Console stream for the baselines (defaults to ``sys.stdout``).
    http_transport, syslog_transport:
        Injection points for tests and embedded deployments.

    Raises
    ------
    RuntimeError
        When a runtime is already installed.
    ValueError
        When the environment holds an invalid setting.
    """

    if is_initialised():
        raise RuntimeError(
            "lib_log_fabric.init() cannot be called twice without shutdown(); call lib_log_fabric.shutdown() first",
        )
    if settings is None:
        settings = load_settings()
    runtime = build_runtime(
        settings,
        stream=stream,
        http_transport=http_transport,
        syslog_transport=syslog_transport,
    )
    try:
        set_runtime(runtime)
    except RuntimeError:
        runtime.shutdown()
        raise
    return runtime.backend


def get(name: str | None = None) -> Logger:
    """Return a :class:`Logger` bound to the installed handler.

    A non-empty ``name`` is attached as the ``logger`` attribute.

    Raises
    ------
    RuntimeError
        When :func:`init` has not been called.
    """

    runtime = current_runtime()
    logger = Logger(runtime.handler, clock=runtime.clock)
    return logger.bind(logger=name) if name else logger


def current_handler() -> HandlerPort:
    """Return the installed handler (raises :class:`RuntimeError` before ``init``)."""

    return current_runtime().handler


def inspect_runtime() -> RuntimeSnapshot:
    """Return a read-only snapshot of the current runtime state."""

    runtime = current_runtime()
    return RuntimeSnapshot(
        backend=runtime.backend,
        service=runtime.service,
        level=runtime.level,
        failures=tuple(str(failure) for failure in runtime.failures),
    )


def shutdown() -> bool:
    """Close the installed handler and clear runtime state.

    Close failures are reported on ``stderr`` and do not stop the teardown.
    Returns ``False`` when nothing was installed or the close reported an
    error, ``True`` otherwise.
    """

    runtime = clear_runtime()
    if runtime is None:
        return False
    return runtime.shutdown()


__all__ = [
    "Logger",
    "LoggingRuntime",
    "RuntimeSnapshot",
    "build_candidates",
    "build_console_handler",
    "current_handler",
    "get",
    "init",
    "inspect_runtime",
    "is_initialised",
    "shutdown",
]
