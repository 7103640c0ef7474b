"""Base interface for gauge sinks."""

from __future__ import annotations

import abc


class GaugeSink(abc.ABC):
    """Receives ``(key, value)`` gauge readings from the collector.

    Keys are dot-separated paths such as ``"mem.heap.Alloc"``; any prefix
    is the sink's concern. Transport failures must not propagate out of
    :meth:`emit`.
    """

    @abc.abstractmethod
    def emit(self, key: str, value: int) -> None:
        """Set gauge *key* to *value*."""

    def shutdown(self) -> None:
        """Flush and release resources."""
