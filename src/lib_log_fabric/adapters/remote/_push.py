"""Shared machinery of the HTTP push handlers (Loki, OTLP).

Purpose
-------
Hold the pieces both push handlers need: the ``httpx`` client factory, the
construction-time probe, the shared resource bundle, and the emit skeleton
(baseline write first, network push on the dispatcher).

Contents
--------
* :func:`create_http_client` - client with the fixed per-request timeout.
* :func:`post_json` / :func:`probe_endpoint` - one request, raise on failure.
* :class:`PushResources` - client + dispatcher shared by a handler family.
* :class:`PushHandler` - base class of :class:`LokiHandler` / :class:`OtlpHandler`.
"""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx

from lib_log_fabric.application.ports.dispatch import DispatchPort
from lib_log_fabric.application.ports.handler import HandlerPort
from lib_log_fabric.domain.errors import CloseError, SetupError
from lib_log_fabric.domain.levels import LogLevel
from lib_log_fabric.domain.records import LogRecord

from ..baseline import BaselineHandler

DEFAULT_TIMEOUT = 5.0
_JSON_HEADERS = {"Content-Type": "application/json"}


def create_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    headers: Mapping[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Return an ``httpx.Client`` sending JSON with a fixed timeout."""

    merged = dict(_JSON_HEADERS)
    merged.update(headers or {})
    return httpx.Client(timeout=timeout, headers=merged, transport=transport)


def post_json(client: httpx.Client, url: str, payload: Mapping[str, Any]) -> httpx.Response:
    """POST ``payload`` as compact JSON and raise for non-2xx answers."""

    body = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    response = client.post(url, content=body)
    response.raise_for_status()
    return response


def probe_endpoint(client: httpx.Client, url: str, payload: Mapping[str, Any], *, backend: str) -> None:
    """Send an empty batch to ``url``; any transport or status error is a :class:`SetupError`."""

    try:
        post_json(client, url, payload)
    except httpx.HTTPError as exc:
        raise SetupError(backend, f"endpoint {url} is not reachable: {exc}") from exc


class PushResources:
    """Client and dispatcher shared by a root handler and everything derived from it."""

    def __init__(self, client: httpx.Client, dispatcher: DispatchPort, *, drain_timeout: float | None = None) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self._drain_timeout = drain_timeout
        self._lock = threading.Lock()
        self._closed = False

    def close(self) -> None:
        """Drain the dispatcher, then close the client; only the first call acts."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self.dispatcher.close(self._drain_timeout)
        finally:
            try:
                self.client.close()
            except (httpx.HTTPError, OSError) as exc:
                raise CloseError(f"closing HTTP client failed: {exc}") from exc


class PushHandler(HandlerPort, ABC):
    """Write to the owned baseline, then push asynchronously.

    Subclasses provide :attr:`backend`, :meth:`build_payload`, and
    :meth:`_derive`.
    """

    backend = "push"

    def __init__(
        self,
        *,
        url: str,
        baseline: BaselineHandler,
        resources: PushResources,
        level: LogLevel | str | int = LogLevel.INFO,
    ) -> None:
        self._url = url
        self._baseline = baseline
        self._resources = resources
        self._level = LogLevel.coerce(level)

    @property
    def url(self) -> str:
        return self._url

    @property
    def baseline(self) -> BaselineHandler:
        return self._baseline

    @property
    def dispatcher(self) -> DispatchPort:
        return self._resources.dispatcher

    def enabled(self, level: LogLevel) -> bool:
        return isinstance(level, LogLevel) and level.value >= self._level.value

    def emit(self, record: LogRecord) -> None:
        """Write ``record`` to the baseline, then queue the push.

        Only the baseline write can raise (:class:`EmitError`); a full queue or
        a failing push is dropped silently.
        """
        if not self.enabled(record.level):
            return
        self._baseline.write_line(self._baseline.render(record), record.level)
        self._resources.dispatcher.submit(lambda: self.deliver(record))

    def deliver(self, record: LogRecord) -> None:
        """Build the payload for ``record`` and POST it (runs on a worker)."""
        post_json(self._resources.client, self._url, self.build_payload(record))

    @abstractmethod
    def build_payload(self, record: LogRecord) -> dict[str, Any]:
        """Return the JSON body pushed for ``record``."""

    def with_attributes(self, extra: Mapping[str, Any]) -> "PushHandler":
        return self._derive(self._baseline.with_attributes(extra))

    def with_group(self, name: str) -> "PushHandler":
        return self._derive(self._baseline.with_group(name))

    def close(self) -> None:
        """Drain pending pushes, close the client, then the baseline."""
        try:
            self._resources.close()
        finally:
            self._baseline.close()

    @abstractmethod
    def _derive(self, baseline: BaselineHandler) -> "PushHandler":
        """Return a sibling handler sharing resources over ``baseline``."""


__all__ = [
    "DEFAULT_TIMEOUT",
    "PushHandler",
    "PushResources",
    "create_http_client",
    "post_json",
    "probe_endpoint",
]
