"""GC family: collection pauses tracked through ``gc.callbacks``."""

from __future__ import annotations

import gc
import logging
import sys
import time
from typing import Any

from ..sink.base import GaugeSink
from .base import PAUSE_SLOTS, MemStats

logger = logging.getLogger(__name__)


class GcPauseTracker:
    """Times every cyclic garbage collection while started.

    The callback runs on whichever thread triggered the collection, with the
    GIL held. It only updates plain attributes, and never takes a lock, since
    the sampling thread may itself trigger a collection while reading.
    """

    def __init__(self) -> None:
        self.pause_ns: list[int] = [0] * PAUSE_SLOTS
        self.pause_total_ns = 0
        self.num_gc = 0
        self.last_gc = 0
        self._started_at: int | None = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        gc.callbacks.append(self._callback)
        self._active = True
        logger.debug("GC pause tracking started")

    def stop(self) -> None:
        if not self._active:
            return
        try:
            gc.callbacks.remove(self._callback)
        except ValueError:
            logger.warning("GC callback was already removed by someone else")
        self._active = False
        self._started_at = None
        logger.debug("GC pause tracking stopped")

    def _callback(self, phase: str, _info: dict[str, Any]) -> None:
        if phase == "start":
            self._started_at = time.perf_counter_ns()
            return
        if phase != "stop" or self._started_at is None:
            return
        pause = time.perf_counter_ns() - self._started_at
        self._started_at = None
        self.pause_ns[self.num_gc % PAUSE_SLOTS] = pause
        self.pause_total_ns += pause
        self.num_gc += 1
        self.last_gc = time.time_ns()

    def fill(self, m: MemStats) -> None:
        """Copy the tracked pause figures into *m*."""
        # num_gc first: copying the buffer allocates and may run a collection,
        # which only ever writes the slot after the one we report.
        m.num_gc = self.num_gc
        m.pause_ns = list(self.pause_ns)
        m.pause_total_ns = self.pause_total_ns
        m.last_gc = self.last_gc


def fill_gc_state(m: MemStats) -> None:
    """Record the collection count, allocation headroom and uncollectable garbage.

    The count covers every generation since interpreter start; a running
    tracker overwrites it with the collections it has timed.
    """
    m.num_gc = sum(gen["collections"] for gen in gc.get_stats())
    threshold0 = gc.get_threshold()[0]
    count0 = gc.get_count()[0]
    m.next_gc = max(threshold0 - count0, 0) if gc.isenabled() and threshold0 else 0
    m.gc_sys = sum(sys.getsizeof(obj) for obj in gc.garbage)


def emit_gc_stats(sink: GaugeSink, m: MemStats) -> None:
    sink.emit("mem.gc.GCSys", m.gc_sys)
    sink.emit("mem.gc.NextGC", m.next_gc)
    sink.emit("mem.gc.LastGC", m.last_gc)
    sink.emit("mem.gc.PauseTotalNs", m.pause_total_ns)
    sink.emit("mem.gc.Pause", m.last_pause_ns)
    sink.emit("mem.gc.NumGC", m.num_gc)
