"""Wiring: build a sink and a collector from configuration."""

from __future__ import annotations

import logging

from .collector.manager import Collector
from .config import RtStatsConfig, load_config
from .errors import ConfigError, InitializationError
from .sink.base import GaugeSink

logger = logging.getLogger(__name__)


def create_sink(config: RtStatsConfig) -> GaugeSink:
    """Create the sink named by ``config.sink.kind``.

    Raises:
        InitializationError: the sink cannot reach or address its backend.
    """
    kind = config.sink.kind
    try:
        if kind == "statsd":
            from .sink.statsd import StatsdSink

            return StatsdSink(config.sink)
        if kind == "otel":
            from .sink.otel import OtelSink

            return OtelSink(config.otel, prefix=config.sink.prefix)
    except ConfigError as exc:
        raise InitializationError(str(exc)) from exc
    raise InitializationError(f"Unknown sink kind {kind!r}")


def initialize(config: RtStatsConfig | None = None) -> Collector:
    """Return a collector wired to the configured sink, ready to run.

    Loads ``rtstats.yaml`` and ``RTSTATS_*`` overrides when *config* is
    None. Nothing is sampled until the collector is started.
    """
    if config is None:
        config = load_config()
    sink = create_sink(config)
    collector = Collector(sink, config.collector)
    logger.info("Collector initialized (sink=%s)", config.sink.kind)
    return collector
