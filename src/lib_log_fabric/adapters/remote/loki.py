"""Loki push handler (metrics-aggregation push API).

Purpose
-------
Ship every record as its own stream entry to ``<url>/loki/api/v1/push``
while the embedded baseline keeps a durable local copy.

Contents
--------
* :data:`DEFAULT_LABELS` - labels applied when the configuration omits them.
* :func:`build_loki_payload` - wire shape of one push.
* :class:`LokiHandler` - :class:`PushHandler` implementation.
* :func:`create_loki_handler` - factory used by the setup chain.

Labels
------
The stream labels are the configured static set plus every *string* attribute
bound through :meth:`LokiHandler.with_attributes`. Other value kinds stay in
the line body only.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import httpx

from lib_log_fabric.application.ports.dispatch import DispatchPort
from lib_log_fabric.domain.attributes import coerce_attributes, flatten
from lib_log_fabric.domain.levels import LogLevel
from lib_log_fabric.domain.records import LogRecord

from .._formatting import render_json
from ..baseline import BaselineHandler
from ..dispatch import BackgroundDispatcher
from ._push import DEFAULT_TIMEOUT, PushHandler, PushResources, create_http_client, probe_endpoint

PUSH_PATH = "/loki/api/v1/push"

DEFAULT_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "job": "python-direct",
        "source": "application",
    }
)

_INVALID_LABEL_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def label_name(key: str) -> str:
    """Return ``key`` as a valid Loki label name.

    Examples
    --------
    >>> label_name("http.route")
    'http_route'
    >>> label_name("9lives")
    '_9lives'
    """
    name = _INVALID_LABEL_CHARS.sub("_", key)
    if name and name[0].isdigit():
        name = f"_{name}"
    return name


def build_loki_payload(labels: Mapping[str, str], timestamp_ns: int, line: str) -> dict[str, Any]:
    """Return the push body carrying one entry in one stream.

    Examples
    --------
    >>> build_loki_payload({"service": "api"}, 17, "{}")
    {'streams': [{'stream': {'service': 'api'}, 'values': [['17', '{}']]}]}
    """
    return {
        "streams": [
            {
                "stream": dict(labels),
                "values": [[str(timestamp_ns), line]],
            }
        ]
    }


class LokiHandler(PushHandler):
    """Push records to Loki after writing them to the baseline."""

    backend = "loki"

    def __init__(
        self,
        *,
        url: str,
        labels: Mapping[str, str],
        baseline: BaselineHandler,
        resources: PushResources,
        level: LogLevel | str | int = LogLevel.INFO,
    ) -> None:
        """Bind the endpoint base ``url`` (push path appended) and the stream labels."""
        super().__init__(url=push_url(url), baseline=baseline, resources=resources, level=level)
        self._base_url = url
        self._labels: Mapping[str, str] = MappingProxyType(dict(labels))

    @property
    def labels(self) -> Mapping[str, str]:
        return self._labels

    def build_payload(self, record: LogRecord) -> dict[str, Any]:
        line = render_json(record, self._baseline.resolve(record))
        return build_loki_payload(self._labels, record.timestamp_ns, line)

    def with_attributes(self, extra: Mapping[str, Any]) -> "LokiHandler":
        labels = dict(self._labels)
        for key, value in flatten(coerce_attributes(extra), self._baseline.context.prefix):
            if isinstance(value, str):
                labels[label_name(key)] = value
        return self._derive(self._baseline.with_attributes(extra), labels)

    def _derive(self, baseline: BaselineHandler, labels: Mapping[str, str] | None = None) -> "LokiHandler":
        return LokiHandler(
            url=self._base_url,
            labels=self._labels if labels is None else labels,
            baseline=baseline,
            resources=self._resources,
            level=self._level,
        )


def push_url(url: str) -> str:
    """Append the push path to a Loki base URL."""
    return f"{url.rstrip('/')}{PUSH_PATH}"


def create_loki_handler(
    url: str,
    *,
    baseline: BaselineHandler,
    service: str,
    labels: Mapping[str, str] | None = None,
    level: LogLevel | str | int = LogLevel.INFO,
    timeout: float = DEFAULT_TIMEOUT,
    verify: bool = True,
    queue_size: int = 1024,
    workers: int = 1,
    transport: httpx.BaseTransport | None = None,
    dispatcher: DispatchPort | None = None,
) -> LokiHandler:
    """Construct a :class:`LokiHandler`, probing the endpoint when ``verify`` is set.

    Raises
    ------
    SetupError
        When the probe push fails.
    """
    merged_labels = {"service": service, **DEFAULT_LABELS}
    merged_labels.update(labels or {})
    client = create_http_client(timeout=timeout, transport=transport)
    if verify:
        try:
            probe_endpoint(client, push_url(url), {"streams": []}, backend=LokiHandler.backend)
        except Exception:
            client.close()
            raise
    if dispatcher is None:
        dispatcher = BackgroundDispatcher(maxsize=queue_size, workers=workers, name="lib_log_fabric-loki")
    resources = PushResources(client, dispatcher, drain_timeout=timeout)
    return LokiHandler(url=url, labels=merged_labels, baseline=baseline, resources=resources, level=level)


__all__ = ["DEFAULT_LABELS", "LokiHandler", "build_loki_payload", "create_loki_handler", "label_name", "push_url"]
