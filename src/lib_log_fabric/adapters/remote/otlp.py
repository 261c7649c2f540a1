"""OTLP/HTTP logs handler (telemetry-collector push API).

Purpose
-------
Send each record as a one-entry ``resourceLogs`` document to
``<endpoint>/v1/logs`` after the embedded baseline wrote it locally.

Contents
--------
* :func:`build_otlp_payload` - JSON shape of one export request.
* :class:`OtlpHandler` - :class:`PushHandler` implementation.
* :func:`create_otlp_handler` - factory used by the setup chain.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from lib_log_fabric import __init__conf__
from lib_log_fabric.application.ports.dispatch import DispatchPort
from lib_log_fabric.domain.attributes import Scalar, stringify
from lib_log_fabric.domain.levels import LogLevel, otlp_severity, severity_text
from lib_log_fabric.domain.records import LogRecord

from ..baseline import BaselineHandler
from ..dispatch import BackgroundDispatcher
from ._push import DEFAULT_TIMEOUT, PushHandler, PushResources, create_http_client, probe_endpoint

LOGS_PATH = "/v1/logs"
SCOPE_NAME = __init__conf__.name
SCOPE_VERSION = __init__conf__.version


def _string_value(value: str) -> dict[str, str]:
    return {"stringValue": value}


def build_otlp_payload(
    record: LogRecord,
    attributes: Sequence[tuple[str, Scalar]],
    *,
    service_name: str,
    scope_name: str = SCOPE_NAME,
    scope_version: str = SCOPE_VERSION,
) -> dict[str, Any]:
    """Return the export body for ``record``; attribute values are stringified."""

    log_record = {
        "timeUnixNano": str(record.timestamp_ns),
        "severityNumber": otlp_severity(record.level),
        "severityText": severity_text(record.level),
        "body": _string_value(record.message),
        "attributes": [{"key": key, "value": _string_value(stringify(value))} for key, value in attributes],
    }
    return {
        "resourceLogs": [
            {
                "resource": {
                    "attributes": [{"key": "service.name", "value": _string_value(service_name)}],
                },
                "scopeLogs": [
                    {
                        "scope": {"name": scope_name, "version": scope_version},
                        "logRecords": [log_record],
                    }
                ],
            }
        ]
    }


def logs_url(endpoint: str) -> str:
    """Return the logs export URL; a bare ``host:port`` gets ``http://``.

    Examples
    --------
    >>> logs_url("collector:4318")
    'http://collector:4318/v1/logs'
    >>> logs_url("https://otel.example/")
    'https://otel.example/v1/logs'
    """
    base = endpoint if "://" in endpoint else f"http://{endpoint}"
    return f"{base.rstrip('/')}{LOGS_PATH}"


class OtlpHandler(PushHandler):
    """Export records over OTLP/HTTP JSON after writing them to the baseline."""

    backend = "otlp"

    def __init__(
        self,
        *,
        endpoint: str,
        service_name: str,
        baseline: BaselineHandler,
        resources: PushResources,
        level: LogLevel | str | int = LogLevel.INFO,
    ) -> None:
        super().__init__(url=logs_url(endpoint), baseline=baseline, resources=resources, level=level)
        self._endpoint = endpoint
        self._service_name = service_name

    @property
    def service_name(self) -> str:
        return self._service_name

    def build_payload(self, record: LogRecord) -> dict[str, Any]:
        return build_otlp_payload(record, self._baseline.resolve(record), service_name=self._service_name)

    def _derive(self, baseline: BaselineHandler) -> "OtlpHandler":
        return OtlpHandler(
            endpoint=self._endpoint,
            service_name=self._service_name,
            baseline=baseline,
            resources=self._resources,
            level=self._level,
        )


def create_otlp_handler(
    endpoint: str,
    *,
    baseline: BaselineHandler,
    service_name: str,
    headers: Mapping[str, str] | None = None,
    level: LogLevel | str | int = LogLevel.INFO,
    timeout: float = DEFAULT_TIMEOUT,
    verify: bool = True,
    queue_size: int = 1024,
    workers: int = 1,
    transport: httpx.BaseTransport | None = None,
    dispatcher: DispatchPort | None = None,
) -> OtlpHandler:
    """Construct an :class:`OtlpHandler`, probing the collector when ``verify`` is set.

    Raises
    ------
    SetupError
        When the probe export fails (collector unreachable or rejecting).
    """
    client = create_http_client(timeout=timeout, headers=headers, transport=transport)
    if verify:
        try:
            probe_endpoint(client, logs_url(endpoint), {"resourceLogs": []}, backend=OtlpHandler.backend)
        except Exception:
            client.close()
            raise
    if dispatcher is None:
        dispatcher = BackgroundDispatcher(maxsize=queue_size, workers=workers, name="lib_log_fabric-otlp")
    resources = PushResources(client, dispatcher, drain_timeout=timeout)
    return OtlpHandler(
        endpoint=endpoint,
        service_name=service_name,
        baseline=baseline,
        resources=resources,
        level=level,
    )


__all__ = ["OtlpHandler", "build_otlp_payload", "create_otlp_handler", "logs_url"]
