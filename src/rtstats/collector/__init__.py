"""Runtime statistics collection."""

from __future__ import annotations

from .base import CpuStats, MemStats
from .manager import Collector, CollectorState

__all__ = ["Collector", "CollectorState", "CpuStats", "MemStats"]
