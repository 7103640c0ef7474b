"""Configuration loading and validation for rtstats."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

DEFAULT_PREFIX = "pillar"
FALLBACK_PREFIX = "go"
SINK_KINDS = ("statsd", "otel")


def normalize_prefix(prefix: str) -> str:
    """Return *prefix* ready to be joined with a metric key.

    An empty prefix becomes ``"go."``; otherwise a trailing ``"."`` is
    ensured. Normalizing an already normalized prefix returns it unchanged.
    """
    if not prefix:
        prefix = FALLBACK_PREFIX
    if not prefix.endswith("."):
        prefix += "."
    return prefix


def validate_interval(value: Any) -> int:
    """Return *value* as a whole number of seconds, at least 1."""
    if isinstance(value, bool):
        raise ConfigError("collector.interval_seconds must be a whole number")
    try:
        interval = int(value)
    except (TypeError, ValueError):
        raise ConfigError("collector.interval_seconds must be a whole number") from None
    if interval != value and not isinstance(value, str):
        raise ConfigError("collector.interval_seconds must be a whole number")
    if interval < 1:
        raise ConfigError("collector.interval_seconds must be at least 1")
    return interval


def split_endpoint(endpoint: str) -> tuple[str, int]:
    """Split a ``host:port`` string, raising :class:`ConfigError` if malformed."""
    host, sep, port = endpoint.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"Endpoint {endpoint!r} is not in host:port form")
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigError(f"Endpoint {endpoint!r} has a non-numeric port") from None
    if not 0 < port_num < 65536:
        raise ConfigError(f"Endpoint {endpoint!r} has an out-of-range port")
    return host.strip("[]"), port_num


@dataclass
class SinkConfig:
    """Where gauges are sent."""

    kind: str = "statsd"
    endpoint: str = "localhost:8125"
    prefix: str = DEFAULT_PREFIX


@dataclass
class CollectorConfig:
    """Sampling interval and metric family toggles.

    ``gc`` only has an effect when ``memory`` is also enabled.
    """

    interval_seconds: int = 1
    cpu: bool = True
    memory: bool = True
    gc: bool = True
    trace_allocations: bool = False


@dataclass
class OtelExporterConfig:
    """OpenTelemetry sink settings."""

    endpoint: str = "http://localhost:4318"
    service_name: str = "rtstats"
    headers: dict[str, str] = field(default_factory=dict)
    export_interval_ms: int = 10000


@dataclass
class RtStatsConfig:
    """Top-level rtstats configuration."""

    sink: SinkConfig = field(default_factory=SinkConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    otel: OtelExporterConfig = field(default_factory=OtelExporterConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using the RTSTATS_ prefix."""
    env_map = {
        "RTSTATS_SINK_KIND": ("sink", "kind"),
        "RTSTATS_ENDPOINT": ("sink", "endpoint"),
        "RTSTATS_PREFIX": ("sink", "prefix"),
        "RTSTATS_INTERVAL": ("collector", "interval_seconds"),
        "RTSTATS_CPU": ("collector", "cpu"),
        "RTSTATS_MEMORY": ("collector", "memory"),
        "RTSTATS_GC": ("collector", "gc"),
        "RTSTATS_OTEL_ENDPOINT": ("otel", "endpoint"),
        "RTSTATS_OTEL_SERVICE_NAME": ("otel", "service_name"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        obj = data
        for part in path[:-1]:
            obj = obj.setdefault(part, {})
        final_key = path[-1]
        if final_key == "interval_seconds":
            try:
                obj[final_key] = int(value)
            except ValueError:
                raise ConfigError(f"{env_key} must be a whole number of seconds") from None
        elif final_key in ("cpu", "memory", "gc"):
            obj[final_key] = _parse_bool(value)
        else:
            obj[final_key] = value
    return data


def _dict_to_config(data: dict[str, Any]) -> RtStatsConfig:
    """Convert a raw dictionary to an :class:`RtStatsConfig`."""
    sink_data = data.get("sink") or {}
    collector_data = data.get("collector") or {}
    otel_data = data.get("otel") or {}

    cfg = RtStatsConfig(
        sink=SinkConfig(**{
            k: v for k, v in sink_data.items()
            if k in SinkConfig.__dataclass_fields__
        }),
        collector=CollectorConfig(**{
            k: v for k, v in collector_data.items()
            if k in CollectorConfig.__dataclass_fields__
        }),
        otel=OtelExporterConfig(**{
            k: v for k, v in otel_data.items()
            if k in OtelExporterConfig.__dataclass_fields__
        }),
    )
    if cfg.sink.prefix is None:
        cfg.sink.prefix = ""
    if cfg.sink.kind not in SINK_KINDS:
        raise ConfigError(
            f"Unknown sink kind {cfg.sink.kind!r} (expected one of {', '.join(SINK_KINDS)})"
        )
    cfg.collector.interval_seconds = validate_interval(cfg.collector.interval_seconds)
    return cfg


def load_config(path: str | Path | None = None) -> RtStatsConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``rtstats.yaml`` in the current directory if *path* is None.
    A missing file yields the defaults.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("rtstats.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
