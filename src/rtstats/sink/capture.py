"""In-memory sink that records every emission."""

from __future__ import annotations

from .base import GaugeSink


class CaptureSink(GaugeSink):
    """Keeps emitted gauges in order, for inspection and one-off snapshots."""

    def __init__(self) -> None:
        self.emissions: list[tuple[str, int]] = []

    def emit(self, key: str, value: int) -> None:
        self.emissions.append((key, value))

    def keys(self) -> list[str]:
        return [key for key, _ in self.emissions]

    def latest(self) -> dict[str, int]:
        """Last value seen for each key."""
        return dict(self.emissions)

    def clear(self) -> None:
        self.emissions.clear()
