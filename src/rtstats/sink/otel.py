"""OpenTelemetry sink – pushes runtime gauges via OTLP/HTTP."""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from ..config import OtelExporterConfig, normalize_prefix
from .base import GaugeSink

logger = logging.getLogger(__name__)


class OtelSink(GaugeSink):
    """Records gauges through the OpenTelemetry SDK.

    Instrument names are case-insensitive in OpenTelemetry, so each key
    family (``pillar.mem.heap`` and so on) is one gauge and the exact
    key, e.g. ``pillar.mem.heap.HeapAlloc``, travels in the ``key``
    attribute. Each call to :meth:`emit` sets that gauge; the SDK's
    ``PeriodicExportingMetricReader`` flushes them to the configured
    OTLP/HTTP endpoint. The provider is private to the sink, so the global
    meter provider of the host process is left alone.
    """

    def __init__(self, config: OtelExporterConfig, prefix: str = "") -> None:
        self._config = config
        self._prefix = normalize_prefix(prefix)
        resource = Resource.create({SERVICE_NAME: config.service_name})

        exporter_kwargs: dict[str, Any] = {
            "endpoint": f"{config.endpoint.rstrip('/')}/v1/metrics",
        }
        if config.headers:
            exporter_kwargs["headers"] = config.headers

        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(**exporter_kwargs),
            export_interval_millis=config.export_interval_ms,
        )
        self._provider = MeterProvider(resource=resource, metric_readers=[reader])
        self._meter = self._provider.get_meter("rtstats.runtime")
        self._gauges: dict[str, Any] = {}

        logger.info(
            "OtelSink initialized → %s (service=%s)",
            config.endpoint,
            config.service_name,
        )

    def _get_gauge(self, name: str) -> Any:
        if name not in self._gauges:
            self._gauges[name] = self._meter.create_gauge(name=name)
        return self._gauges[name]

    def emit(self, key: str, value: int) -> None:
        full_key = self._prefix + key
        family = full_key.rpartition(".")[0]
        self._get_gauge(family).set(int(value), attributes={"key": full_key})

    def shutdown(self) -> None:
        self._provider.shutdown()
        logger.info("OtelSink shut down")
