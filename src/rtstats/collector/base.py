"""Runtime samples read by the collector on each tick."""

from __future__ import annotations

from dataclasses import dataclass, field

PAUSE_SLOTS = 256


@dataclass
class CpuStats:
    """Thread and foreign-call counters."""

    num_goroutine: int = 0
    num_cgo_call: int = 0


@dataclass
class MemStats:
    """One consistent view of the process's memory and GC state.

    Field names follow the gauge keys they feed. ``MemStats()`` is the
    all-zero sample used when zeroing gauges on shutdown.
    """

    # general
    alloc: int = 0
    total_alloc: int = 0
    sys: int = 0
    lookups: int = 0
    mallocs: int = 0
    frees: int = 0

    # heap
    heap_alloc: int = 0
    heap_sys: int = 0
    heap_idle: int = 0
    heap_inuse: int = 0
    heap_released: int = 0
    heap_objects: int = 0

    # stack and allocator internals
    stack_inuse: int = 0
    stack_sys: int = 0
    mspan_inuse: int = 0
    mspan_sys: int = 0
    mcache_inuse: int = 0
    mcache_sys: int = 0
    other_sys: int = 0

    # gc
    gc_sys: int = 0
    next_gc: int = 0
    last_gc: int = 0
    pause_total_ns: int = 0
    pause_ns: list[int] = field(default_factory=lambda: [0] * PAUSE_SLOTS)
    num_gc: int = 0

    @property
    def last_pause_ns(self) -> int:
        """Duration of the most recent pause, read from the circular buffer."""
        return self.pause_ns[(self.num_gc + PAUSE_SLOTS - 1) % PAUSE_SLOTS]
