"""Environment-driven configuration.

Purpose
-------
Translate process environment variables (optionally seeded from a ``.env``
file through :mod:`dotenv`) into a :class:`FabricSettings` value.

Contents
--------
* :func:`load_settings` - environment to settings.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``.env`` support.
* Parsers for booleans, numbers, levels, and ``k=v`` pair lists.

System Role
-----------
Runs once during :func:`lib_log_fabric.init` when no settings object is
passed. Invalid values raise :class:`ValueError` naming the variable, so a
misconfiguration fails at startup instead of silently choosing a backend.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from lib_log_fabric.domain.levels import LogLevel
from lib_log_fabric.settings import (
    DEFAULT_SERVICE,
    DispatchSettings,
    FabricSettings,
    FileSettings,
    LokiSettings,
    OtlpSettings,
    SyslogSettings,
)

DOTENV_ENV_VAR = "LIB_LOG_FABRIC_USE_DOTENV"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

_DOTENV_LOCK = threading.Lock()
_DOTENV_LOADED: Path | None = None


def parse_bool(name: str, raw: str) -> bool:
    """Interpret ``raw`` as a boolean flag.

    Examples
    --------
    >>> parse_bool("LOG_NO_COLOR", "Yes")
    True
    >>> parse_bool("LOG_NO_COLOR", "maybe")
    Traceback (most recent call last):
    ...
    ValueError: LOG_NO_COLOR must be a boolean (true/false), got 'maybe'
    """
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


def parse_int(name: str, raw: str, *, minimum: int = 0) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def parse_level(name: str, raw: str) -> LogLevel:
    try:
        return LogLevel.from_name(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be one of debug, info, warn, error; got {raw!r}") from exc


def parse_pairs(name: str, raw: str) -> dict[str, str]:
    """Parse ``k1=v1,k2=v2`` into a dict; blank entries are skipped.

    Examples
    --------
    >>> parse_pairs("OTEL_EXPORTER_OTLP_HEADERS", "authorization=Bearer x, tenant = blue")
    {'authorization': 'Bearer x', 'tenant': 'blue'}
    """
    pairs: dict[str, str] = {}
    for chunk in raw.split(","):
        if not chunk.strip():
            continue
        key, sep, value = chunk.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"{name} entries must look like key=value, got {chunk.strip()!r}")
        pairs[key] = value.strip()
    return pairs


def _get(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(environ: Mapping[str, str] | None = None) -> FabricSettings:
    """Build :class:`FabricSettings` from ``environ`` (defaults to :data:`os.environ`)."""

    env = os.environ if environ is None else environ
    service = _get(env, "SERVICE_NAME") or DEFAULT_SERVICE

    raw = _get(env, "LOG_LEVEL")
    level = parse_level("LOG_LEVEL", raw) if raw else LogLevel.INFO

    line_format = (_get(env, "LOG_FORMAT") or "text").lower()
    if line_format not in ("text", "json"):
        raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got {line_format!r}")

    otlp = None
    endpoint = _get(env, "OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        raw = _get(env, "OTEL_EXPORTER_OTLP_HEADERS")
        headers = parse_pairs("OTEL_EXPORTER_OTLP_HEADERS", raw) if raw else {}
        otlp = OtlpSettings(endpoint=endpoint, headers=headers, service_name=service)

    loki = None
    url = _get(env, "LOKI_URL")
    if url:
        raw = _get(env, "LOKI_LABELS")
        loki = LokiSettings(url=url, labels=parse_pairs("LOKI_LABELS", raw) if raw else {})

    syslog = None
    address = _get(env, "SYSLOG_ADDRESS")
    network = _get(env, "SYSLOG_NETWORK")
    if address or network:
        if network is None:
            network = "udp"
        try:
            syslog = SyslogSettings(network=network, address=address or "", tag=_get(env, "SYSLOG_TAG") or service)
        except ValueError as exc:
            raise ValueError(f"SYSLOG_NETWORK/SYSLOG_ADDRESS: {exc}") from exc

    file_settings = None
    path = _get(env, "LOG_FILE_PATH")
    if path:
        file_settings = FileSettings(
            path=Path(path),
            max_size_mb=_int_or(env, "LOG_FILE_MAX_SIZE_MB", 100),
            max_backups=_int_or(env, "LOG_FILE_MAX_BACKUPS", 5),
            max_age_days=_int_or(env, "LOG_FILE_MAX_AGE_DAYS", 30),
            compress=_bool_or(env, "LOG_FILE_COMPRESS", True),
            mirror_console=_bool_or(env, "LOG_FILE_MIRROR_CONSOLE", True),
        )

    raw = _get(env, "LOG_PUSH_TIMEOUT")
    dispatch = DispatchSettings(
        queue_size=_int_or(env, "LOG_DISPATCH_QUEUE_SIZE", 1024),
        workers=_int_or(env, "LOG_DISPATCH_WORKERS", 1, minimum=1),
        timeout=parse_float("LOG_PUSH_TIMEOUT", raw) if raw else 5.0,
        verify=_bool_or(env, "LOG_PUSH_VERIFY", True),
    )

    return FabricSettings(
        service=service,
        level=level,
        line_format=line_format,
        force_color=_bool_or(env, "LOG_FORCE_COLOR", False),
        no_color=_bool_or(env, "LOG_NO_COLOR", False),
        otlp=otlp,
        loki=loki,
        syslog=syslog,
        file=file_settings,
        dispatch=dispatch,
    )


def _int_or(environ: Mapping[str, str], name: str, default: int, *, minimum: int = 0) -> int:
    raw = _get(environ, name)
    return default if raw is None else parse_int(name, raw, minimum=minimum)


def _bool_or(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _get(environ, name)
    return default if raw is None else parse_bool(name, raw)


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether to load ``.env``: an explicit CLI choice wins over the toggle variable."""

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUE_VALUES


def enable_dotenv(path: str | Path | None = None) -> Path | None:
    """Load ``path`` or the nearest ``.env`` above the working directory.

    Existing environment variables are never overridden. The first successful
    load is cached; later calls return the cached path without re-reading.
    Returns ``None`` when no file was found.
    """

    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        if _DOTENV_LOADED is not None:
            return _DOTENV_LOADED
        candidate = str(path) if path is not None else find_dotenv(usecwd=True)
        if not candidate or not Path(candidate).is_file():
            return None
        resolved = Path(candidate).resolve()
        load_dotenv(resolved, override=False)
        _DOTENV_LOADED = resolved
        return resolved


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        _DOTENV_LOADED = None


__all__ = [
    "DOTENV_ENV_VAR",
    "enable_dotenv",
    "load_settings",
    "parse_bool",
    "parse_pairs",
    "should_use_dotenv",
]
