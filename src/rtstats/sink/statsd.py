"""StatsD sink – sends gauges to a StatsD daemon over UDP."""

from __future__ import annotations

import logging

from statsd import StatsClient

from ..config import SinkConfig, normalize_prefix, split_endpoint
from ..errors import InitializationError
from .base import GaugeSink

logger = logging.getLogger(__name__)


class StatsdSink(GaugeSink):
    """Forwards gauges to StatsD with a sample rate of 1.0.

    The host is resolved once, when the sink is created; an unresolvable
    host raises :class:`InitializationError`. Sends are fire-and-forget.
    """

    def __init__(self, config: SinkConfig) -> None:
        self._prefix = normalize_prefix(config.prefix)
        host, port = split_endpoint(config.endpoint)
        try:
            self._client = StatsClient(host=host, port=port, ipv6=":" in host)
        except OSError as exc:
            raise InitializationError(
                f"Cannot open StatsD socket to {config.endpoint}: {exc}"
            ) from exc
        logger.info("StatsdSink initialized → %s (prefix=%s)", config.endpoint, self._prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    def emit(self, key: str, value: int) -> None:
        self._client.gauge(self._prefix + key, int(value), rate=1)

    def shutdown(self) -> None:
        self._client.close()
        logger.info("StatsdSink shut down")
