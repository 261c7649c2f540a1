"""Syslog handler and its socket transport.

Purpose
-------
Deliver records to a local or remote syslog daemon after the embedded
baseline wrote them. Unlike the push handlers, the syslog leg runs inline and
its failures reach the caller as :class:`EmitError`.

Contents
--------
* :class:`SyslogTransport` - UDP, TCP, or local unix-socket client.
* :class:`SyslogHandler` - :class:`HandlerPort` implementation.
* :func:`create_syslog_handler` - factory used by the setup chain.

Wire format
-----------
Remote: ``<PRI>RFC3339 hostname tag[pid]: line``; local: ``<PRI>Mmm dd
hh:mm:ss tag[pid]: line``. Both end with a newline. ``PRI`` is
``facility * 8 + severity`` with the severity from :func:`syslog_severity`.
"""

from __future__ import annotations

import os
import socket
import threading
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from lib_log_fabric.application.ports.handler import HandlerPort
from lib_log_fabric.domain.errors import CloseError, EmitError, SetupError
from lib_log_fabric.domain.levels import LogLevel, syslog_severity
from lib_log_fabric.domain.records import LogRecord

from ..baseline import BaselineHandler

LOG_LOCAL0 = 16
DEFAULT_PORT = 514
DEFAULT_TIMEOUT = 5.0
LOCAL_NETWORKS = frozenset({"", "local", "unix", "unixgram"})
REMOTE_NETWORKS = frozenset({"udp", "tcp"})
_LOCAL_SOCKET_PATHS: Sequence[str] = ("/dev/log", "/var/run/syslog", "/var/run/log")


def split_address(address: str, default_port: int = DEFAULT_PORT) -> tuple[str, int]:
    """Split ``host[:port]`` (IPv6 in brackets) into a tuple.

    Examples
    --------
    >>> split_address("logs.example:1514")
    ('logs.example', 1514)
    >>> split_address("[::1]")
    ('::1', 514)
    """
    address = address.strip()
    if not address:
        raise ValueError("syslog address must not be empty")
    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port_text = rest.lstrip(":")
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
    else:
        host, port_text = address, ""
    if not port_text:
        return host, default_port
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(f"syslog port must be an integer, got {port_text!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"syslog port out of range: {port}")
    return host, port


class SyslogTransport:
    """Socket client speaking the BSD syslog format.

    ``network`` is ``udp`` or ``tcp`` for a remote daemon at ``address``, or
    one of ``local``/``unix``/``unixgram``/empty for the local daemon, in
    which case ``address`` is an optional socket path.
    """

    def __init__(
        self,
        *,
        network: str | None,
        address: str | None,
        tag: str,
        facility: int = LOG_LOCAL0,
        timeout: float = DEFAULT_TIMEOUT,
        hostname: str | None = None,
    ) -> None:
        network = (network or "").lower()
        if network not in LOCAL_NETWORKS | REMOTE_NETWORKS:
            raise ValueError(f"unsupported syslog network: {network!r}")
        self._network = network
        self._address = address or ""
        self._tag = tag
        self._facility = facility
        self._timeout = timeout
        self._hostname = hostname or socket.gethostname()
        self._pid = os.getpid()
        self._lock = threading.Lock()
        self._sock: socket.socket | None = None
        self._target: Any = None
        self._closed = False

    @property
    def is_local(self) -> bool:
        return self._network in LOCAL_NETWORKS

    @property
    def network(self) -> str:
        return self._network or "local"

    def connect(self) -> None:
        """Open the socket (or resolve the UDP target); raises :class:`OSError`."""
        with self._lock:
            self._connect_locked()

    def send(self, severity: int, line: str, timestamp: datetime | None = None) -> None:
        """Send ``line`` at ``severity``; TCP and local stream sockets retry once after reconnecting."""
        message = self.format(severity, line, timestamp).encode("utf-8", errors="replace")
        with self._lock:
            if self._closed:
                raise OSError("syslog transport is closed")
            try:
                self._write_locked(message)
            except OSError:
                if self._network == "udp":
                    raise
                self._reset_locked()
                self._connect_locked()
                self._write_locked(message)

    def format(self, severity: int, line: str, timestamp: datetime | None = None) -> str:
        """Return the framed syslog message for ``line``."""
        priority = self._facility * 8 + severity
        moment = timestamp or datetime.now(timezone.utc)
        if self.is_local:
            local = moment.astimezone()
            header = f"<{priority}>{local:%b} {local.day:2d} {local:%H:%M:%S} {self._tag}[{self._pid}]:"
        else:
            stamp = moment.isoformat(timespec="seconds").replace("+00:00", "Z")
            header = f"<{priority}>{stamp} {self._hostname} {self._tag}[{self._pid}]:"
        message = f"{header} {line}"
        return message if message.endswith("\n") else f"{message}\n"

    def close(self) -> None:
        """Close the socket once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._reset_locked()

    def _connect_locked(self) -> None:
        if self._sock is not None:
            return
        if self._network == "udp":
            host, port = split_address(self._address)
            family, kind, proto, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
            sock = socket.socket(family, kind, proto)
            sock.settimeout(self._timeout)
            self._sock, self._target = sock, sockaddr
        elif self._network == "tcp":
            host, port = split_address(self._address)
            self._sock = socket.create_connection((host, port), timeout=self._timeout)
            self._target = None
        else:
            self._sock = self._connect_local()

    def _connect_local(self) -> socket.socket:
        paths = [self._address] if self._address else list(_LOCAL_SOCKET_PATHS)
        kinds = [socket.SOCK_DGRAM, socket.SOCK_STREAM]
        if self._network == "unix":
            kinds = [socket.SOCK_STREAM]
        elif self._network == "unixgram":
            kinds = [socket.SOCK_DGRAM]
        last_error: OSError | None = None
        for path in paths:
            for kind in kinds:
                sock = socket.socket(socket.AF_UNIX, kind)
                try:
                    sock.settimeout(self._timeout)
                    sock.connect(path)
                except OSError as exc:
                    sock.close()
                    last_error = exc
                    continue
                return sock
        raise last_error or OSError("no local syslog socket available")

    def _write_locked(self, message: bytes) -> None:
        if self._sock is None:
            self._connect_locked()
        if self._sock is None:
            raise OSError("syslog socket is not connected")
        if self._network == "udp":
            self._sock.sendto(message, self._target)
        else:
            self._sock.sendall(message)

    def _reset_locked(self) -> None:
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()


class SyslogHandler(HandlerPort):
    """Write to the owned baseline, then send through the syslog transport."""

    backend = "syslog"

    def __init__(
        self,
        *,
        transport: SyslogTransport,
        baseline: BaselineHandler,
        level: LogLevel | str | int = LogLevel.INFO,
    ) -> None:
        self._transport = transport
        self._baseline = baseline
        self._level = LogLevel.coerce(level)

    @property
    def baseline(self) -> BaselineHandler:
        return self._baseline

    @property
    def transport(self) -> SyslogTransport:
        return self._transport

    def enabled(self, level: LogLevel) -> bool:
        return isinstance(level, LogLevel) and level.value >= self._level.value

    def emit(self, record: LogRecord) -> None:
        """Write ``record`` to the baseline, then to syslog.

        Raises
        ------
        EmitError
            When the baseline write or the syslog send fails.
        """
        if not self.enabled(record.level):
            return
        line = self._baseline.render(record)
        self._baseline.write_line(line, record.level)
        try:
            self._transport.send(syslog_severity(record.level), line, record.timestamp)
        except OSError as exc:
            raise EmitError(f"syslog send failed: {exc}") from exc

    def with_attributes(self, extra: Mapping[str, Any]) -> "SyslogHandler":
        return SyslogHandler(transport=self._transport, baseline=self._baseline.with_attributes(extra), level=self._level)

    def with_group(self, name: str) -> "SyslogHandler":
        return SyslogHandler(transport=self._transport, baseline=self._baseline.with_group(name), level=self._level)

    def close(self) -> None:
        """Close the transport and the baseline writers."""
        try:
            self._transport.close()
        except OSError as exc:
            raise CloseError(f"closing syslog transport failed: {exc}") from exc
        finally:
            self._baseline.close()


def create_syslog_handler(
    *,
    network: str | None,
    address: str | None,
    tag: str,
    baseline: BaselineHandler,
    level: LogLevel | str | int = LogLevel.INFO,
    facility: int = LOG_LOCAL0,
    timeout: float = DEFAULT_TIMEOUT,
    transport: SyslogTransport | None = None,
) -> SyslogHandler:
    """Connect a transport and wrap it in a :class:`SyslogHandler`.

    Raises
    ------
    SetupError
        When the transport cannot be created or connected.
    """
    try:
        if transport is None:
            transport = SyslogTransport(network=network, address=address, tag=tag, facility=facility, timeout=timeout)
        transport.connect()
    except (OSError, ValueError) as exc:
        raise SetupError(SyslogHandler.backend, f"cannot connect to {network or 'local'} {address or ''}: {exc}".rstrip()) from exc
    return SyslogHandler(transport=transport, baseline=baseline, level=level)


__all__ = [
    "LOG_LOCAL0",
    "SyslogHandler",
    "SyslogTransport",
    "create_syslog_handler",
    "split_address",
]
