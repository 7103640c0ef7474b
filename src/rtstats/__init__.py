"""
rtstats

In-process runtime telemetry: periodically reports this Python process's
thread, memory and garbage-collection figures as gauges to StatsD or
OpenTelemetry.
"""

from __future__ import annotations

from .collector import Collector, CollectorState
from .config import CollectorConfig, RtStatsConfig, load_config, normalize_prefix
from .core import create_sink, initialize
from .errors import CollectorStateError, ConfigError, InitializationError, RtStatsError
from .sink import CaptureSink, GaugeSink

__all__ = [
    "CaptureSink",
    "Collector",
    "CollectorConfig",
    "CollectorState",
    "CollectorStateError",
    "ConfigError",
    "GaugeSink",
    "InitializationError",
    "RtStatsConfig",
    "RtStatsError",
    "__version__",
    "create_sink",
    "initialize",
    "load_config",
    "normalize_prefix",
]

__version__ = "0.1.0"
