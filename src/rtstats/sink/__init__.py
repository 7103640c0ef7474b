"""Gauge sinks."""

from __future__ import annotations

from .base import GaugeSink
from .capture import CaptureSink

__all__ = ["CaptureSink", "GaugeSink"]
