"""Runtime composition helpers wiring settings, adapters, and use cases.

Purpose
-------
Translate :class:`FabricSettings` into the ordered candidate list of the
priority chain and into the live :class:`LoggingRuntime` singleton.

Contents
--------
* :class:`SystemClock` - wall-clock implementation of :class:`ClockPort`.
* :func:`build_console_handler` / :func:`build_file_handler` - baselines.
* :func:`build_candidates` - OTLP > Loki > syslog > file, as configured.
* :func:`build_runtime` - run the chain and bundle the result.

System Role
-----------
Anchors the clean-architecture boundary: concrete adapters are chosen here,
while :mod:`lib_log_fabric.runtime` exposes only the façade.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from typing import TextIO

import httpx

from lib_log_fabric.adapters import (
    BaselineHandler,
    ConsoleWriter,
    RotatingFileWriter,
    SyslogTransport,
    create_loki_handler,
    create_otlp_handler,
    create_syslog_handler,
)
from lib_log_fabric.application.ports import HandlerPort, LineWriterPort
from lib_log_fabric.application.use_cases import BackendCandidate, create_shutdown, setup_handler
from lib_log_fabric.domain import CloseError
from lib_log_fabric.settings import FabricSettings, FileSettings

from ._state import LoggingRuntime


class SystemClock:
    """Return :func:`time.time_ns`."""

    def now_ns(self) -> int:
        return time.time_ns()


def _console_writer(settings: FabricSettings, stream: TextIO | None) -> ConsoleWriter:
    return ConsoleWriter(stream=stream, force_color=settings.force_color, no_color=settings.no_color)


def build_console_handler(settings: FabricSettings, *, stream: TextIO | None = None) -> BaselineHandler:
    """Return the console baseline (terminal fallback and remote safety net)."""

    return BaselineHandler(
        [_console_writer(settings, stream)],
        level=settings.level,
        line_format=settings.line_format,
    )


def build_file_handler(
    settings: FabricSettings,
    file_settings: FileSettings,
    *,
    stream: TextIO | None = None,
) -> BaselineHandler:
    """Return the file baseline, mirrored to the console unless disabled.

    Raises
    ------
    SetupError
        When the log file cannot be opened.
    """

    writers: list[LineWriterPort] = []
    if file_settings.mirror_console:
        writers.append(_console_writer(settings, stream))
    writers.append(
        RotatingFileWriter(
            file_settings.path,
            max_size_mb=file_settings.max_size_mb,
            max_backups=file_settings.max_backups,
            max_age_days=file_settings.max_age_days,
            compress=file_settings.compress,
        )
    )
    return BaselineHandler(writers, level=settings.level, line_format=settings.line_format)


def _with_baseline(
    settings: FabricSettings,
    stream: TextIO | None,
    build: Callable[[BaselineHandler], HandlerPort],
) -> Callable[[], HandlerPort]:
    """Wrap ``build`` so it receives a fresh console baseline."""

    def factory() -> HandlerPort:
        return build(build_console_handler(settings, stream=stream))

    return factory


def build_candidates(
    settings: FabricSettings,
    *,
    stream: TextIO | None = None,
    http_transport: httpx.BaseTransport | None = None,
    syslog_transport: SyslogTransport | None = None,
) -> list[BackendCandidate]:
    """Return the configured backends in priority order (console excluded).

    Examples
    --------
    >>> from lib_log_fabric.settings import LokiSettings, SyslogSettings
    >>> settings = FabricSettings(syslog=SyslogSettings("udp", "127.0.0.1:514"), loki=LokiSettings("http://loki:3100"))
    >>> [candidate.name for candidate in build_candidates(settings)]
    ['loki', 'syslog']
    """

    dispatch = settings.dispatch
    candidates: list[BackendCandidate] = []

    otlp = settings.otlp
    if otlp is not None:
        candidates.append(
            BackendCandidate(
                "otlp",
                _with_baseline(
                    settings,
                    stream,
                    lambda baseline: create_otlp_handler(
                        otlp.endpoint,
                        baseline=baseline,
                        service_name=otlp.service_name or settings.service,
                        headers=otlp.headers,
                        level=settings.level,
                        timeout=dispatch.timeout,
                        verify=dispatch.verify,
                        queue_size=dispatch.queue_size,
                        workers=dispatch.workers,
                        transport=http_transport,
                    ),
                ),
                otlp.endpoint,
            )
        )

    loki = settings.loki
    if loki is not None:
        candidates.append(
            BackendCandidate(
                "loki",
                _with_baseline(
                    settings,
                    stream,
                    lambda baseline: create_loki_handler(
                        loki.url,
                        baseline=baseline,
                        service=settings.service,
                        labels=loki.labels,
                        level=settings.level,
                        timeout=dispatch.timeout,
                        verify=dispatch.verify,
                        queue_size=dispatch.queue_size,
                        workers=dispatch.workers,
                        transport=http_transport,
                    ),
                ),
                loki.url,
            )
        )

    syslog = settings.syslog
    if syslog is not None:
        candidates.append(
            BackendCandidate(
                "syslog",
                _with_baseline(
                    settings,
                    stream,
                    lambda baseline: create_syslog_handler(
                        network=syslog.network,
                        address=syslog.address,
                        tag=syslog.tag,
                        facility=syslog.facility,
                        baseline=baseline,
                        level=settings.level,
                        timeout=dispatch.timeout,
                        transport=syslog_transport,
                    ),
                ),
                f"{syslog.network or 'local'} {syslog.address}".rstrip(),
            )
        )

    file_settings = settings.file
    if file_settings is not None:
        candidates.append(
            BackendCandidate(
                "file",
                lambda: build_file_handler(settings, file_settings, stream=stream),
                str(file_settings.path),
            )
        )

    return candidates


def _report_close_error(error: CloseError) -> None:
    print(f"lib_log_fabric: error while closing the log handler: {error}", file=sys.stderr)


def build_runtime(
    settings: FabricSettings,
    *,
    stream: TextIO | None = None,
    http_transport: httpx.BaseTransport | None = None,
    syslog_transport: SyslogTransport | None = None,
) -> LoggingRuntime:
    """Run the priority chain for ``settings`` and bundle the winner."""

    fallback = build_console_handler(settings, stream=stream)
    candidates = build_candidates(
        settings,
        stream=stream,
        http_transport=http_transport,
        syslog_transport=syslog_transport,
    )
    result = setup_handler(candidates, fallback=fallback)
    return LoggingRuntime(
        handler=result.handler,
        backend=result.backend,
        service=settings.service,
        level=settings.level,
        failures=result.failures,
        clock=SystemClock(),
        shutdown=create_shutdown(result.handler, report=_report_close_error),
    )


__all__ = [
    "SystemClock",
    "build_candidates",
    "build_console_handler",
    "build_file_handler",
    "build_runtime",
]
