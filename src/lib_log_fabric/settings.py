"""Frozen configuration objects for the emission fabric.

Purpose
-------
Describe every backend's configuration as an immutable value built once at
startup, either by :func:`lib_log_fabric.config.load_settings` or by hand.

Contents
--------
* :class:`FileSettings`, :class:`SyslogSettings`, :class:`LokiSettings`,
  :class:`OtlpSettings` - one per optional backend.
* :class:`DispatchSettings` - shared knobs of the push handlers.
* :class:`FabricSettings` - aggregate consumed by the runtime.

System Role
-----------
A backend participates in the priority chain only when its settings object is
present on :class:`FabricSettings`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from lib_log_fabric.domain.levels import LogLevel

DEFAULT_SERVICE = "lib_log_fabric"
SYSLOG_FACILITY_LOCAL0 = 16


def _frozen_mapping(values: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


@dataclass(slots=True, frozen=True)
class FileSettings:
    """Rotating file sink configuration; limits of ``0`` disable that rule."""

    path: Path
    max_size_mb: int = 100
    max_backups: int = 5
    max_age_days: int = 30
    compress: bool = True
    mirror_console: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        for name in ("max_size_mb", "max_backups", "max_age_days"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")


@dataclass(slots=True, frozen=True)
class SyslogSettings:
    """Syslog target; ``network`` empty or ``local`` selects the local daemon."""

    network: str = "udp"
    address: str = ""
    tag: str = DEFAULT_SERVICE
    facility: int = SYSLOG_FACILITY_LOCAL0

    def __post_init__(self) -> None:
        network = (self.network or "").strip().lower()
        if network not in {"", "local", "unix", "unixgram", "udp", "tcp"}:
            raise ValueError(f"unsupported syslog network: {self.network!r}")
        if network in {"udp", "tcp"} and not self.address:
            raise ValueError(f"syslog network {network} needs an address")
        if not 0 <= self.facility <= 23:
            raise ValueError(f"syslog facility out of range: {self.facility}")
        object.__setattr__(self, "network", network)


@dataclass(slots=True, frozen=True)
class LokiSettings:
    """Loki base URL plus labels merged over the default label set."""

    url: str
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Loki URL must not be empty")
        object.__setattr__(self, "labels", _frozen_mapping(self.labels))


@dataclass(slots=True, frozen=True)
class OtlpSettings:
    """OTLP/HTTP collector endpoint and extra request headers."""

    endpoint: str
    headers: Mapping[str, str] = field(default_factory=dict)
    service_name: str | None = None

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ValueError("OTLP endpoint must not be empty")
        object.__setattr__(self, "headers", _frozen_mapping(self.headers))


@dataclass(slots=True, frozen=True)
class DispatchSettings:
    """Queue and HTTP settings shared by the push handlers.

    ``queue_size`` of ``0`` leaves the dispatch queue unbounded.
    """

    queue_size: int = 1024
    workers: int = 1
    timeout: float = 5.0
    verify: bool = True

    def __post_init__(self) -> None:
        if self.queue_size < 0:
            raise ValueError("queue_size must not be negative")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


@dataclass(slots=True, frozen=True)
class FabricSettings:
    """Everything the runtime needs to build the active handler."""

    service: str = DEFAULT_SERVICE
    level: LogLevel = LogLevel.INFO
    line_format: str = "text"
    force_color: bool = False
    no_color: bool = False
    otlp: OtlpSettings | None = None
    loki: LokiSettings | None = None
    syslog: SyslogSettings | None = None
    file: FileSettings | None = None
    dispatch: DispatchSettings = field(default_factory=DispatchSettings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", LogLevel.coerce(self.level))
        if self.line_format not in ("text", "json"):
            raise ValueError(f"line_format must be 'text' or 'json', got {self.line_format!r}")

    @property
    def configured_backends(self) -> tuple[str, ...]:
        """Return backend names in priority order, ``console`` always last.

        Examples
        --------
        >>> FabricSettings(loki=LokiSettings("http://loki:3100")).configured_backends
        ('loki', 'console')
        """
        names = [
            name
            for name, value in (("otlp", self.otlp), ("loki", self.loki), ("syslog", self.syslog), ("file", self.file))
            if value is not None
        ]
        names.append("console")
        return tuple(names)


__all__ = [
    "DEFAULT_SERVICE",
    "DispatchSettings",
    "FabricSettings",
    "FileSettings",
    "LokiSettings",
    "OtlpSettings",
    "SyslogSettings",
]
