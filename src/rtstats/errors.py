"""Exception hierarchy for rtstats."""

from __future__ import annotations


class RtStatsError(Exception):
    """Base class for errors raised by rtstats."""


class ConfigError(RtStatsError):
    """The configuration cannot be turned into a working setup."""


class InitializationError(RtStatsError):
    """The gauge sink could not be created, so collection cannot start."""


class CollectorStateError(RtStatsError):
    """A collector operation was attempted in the wrong lifecycle state."""
