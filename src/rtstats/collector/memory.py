"""Memory family: heap, stack and allocator figures for this process."""

from __future__ import annotations

import functools
import gc
import sys
import threading
import tracemalloc

import psutil

from ..sink.base import GaugeSink
from .base import MemStats
from .gcstats import GcPauseTracker, fill_gc_state

if sys.platform != "win32":
    import resource

DEFAULT_THREAD_STACK = 8 * 1024 * 1024


@functools.lru_cache(maxsize=1)
def _default_stack_size() -> int:
    """Stack reserved for a thread started without an explicit size."""
    if sys.platform == "win32":
        return DEFAULT_THREAD_STACK
    soft, _hard = resource.getrlimit(resource.RLIMIT_STACK)
    if soft <= 0 or soft == resource.RLIM_INFINITY:
        return DEFAULT_THREAD_STACK
    return soft


def _peak_rss(mem_info: object) -> int:
    """Peak resident set size in bytes, or 0 where the platform hides it."""
    peak = getattr(mem_info, "peak_wset", None)
    if peak is not None:
        return int(peak)
    if sys.platform == "win32":
        return 0
    maxrss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports KiB, macOS bytes.
    return int(maxrss) if sys.platform == "darwin" else int(maxrss) * 1024


def _frame_bytes() -> int:
    total = 0
    for frame in sys._current_frames().values():
        f = frame
        while f is not None:
            total += sys.getsizeof(f)
            f = f.f_back
    return total


def read_mem_stats(
    process: psutil.Process | None = None,
    tracker: GcPauseTracker | None = None,
) -> MemStats:
    """Take one memory snapshot of the current process.

    Heap figures come from ``tracemalloc`` when it is tracing, and from the
    process's private resident memory otherwise. The collection count is
    always filled in; pause figures only when a running *tracker* is given.
    """
    proc = process or psutil.Process()
    mi = proc.memory_info()
    rss = int(mi.rss)
    shared = int(getattr(mi, "shared", 0))

    m = MemStats()
    m.sys = int(mi.vms)
    m.other_sys = shared

    if tracemalloc.is_tracing():
        current, peak = tracemalloc.get_traced_memory()
        m.heap_alloc = current
        m.total_alloc = peak
    else:
        m.heap_alloc = max(rss - shared, 0)
        m.total_alloc = max(_peak_rss(mi), m.heap_alloc)
    m.alloc = m.heap_alloc
    m.heap_inuse = m.heap_alloc

    m.heap_sys = int(getattr(mi, "data", rss))
    m.heap_idle = max(m.heap_sys - m.heap_inuse, 0)
    m.heap_released = max(m.heap_sys - rss, 0)
    m.heap_objects = sys.getallocatedblocks()
    m.frees = sum(gen["collected"] for gen in gc.get_stats())
    m.mallocs = m.heap_objects + m.frees

    m.stack_sys = threading.active_count() * (threading.stack_size() or _default_stack_size())
    m.stack_inuse = _frame_bytes()

    fill_gc_state(m)
    if tracker is not None and tracker.active:
        tracker.fill(m)
    return m


def emit_mem_stats(sink: GaugeSink, m: MemStats) -> None:
    # sys
    sink.emit("mem.sys.Sys", m.sys)
    sink.emit("mem.sys.Lookups", m.lookups)
    sink.emit("mem.sys.OtherSys", m.other_sys)

    # common
    sink.emit("mem.com.Total_VM_Bytes_Reserved", m.sys)
    sink.emit("mem.com.Live_Heap_Bytes_Allocated", m.alloc)
    sink.emit("mem.com.Cumulative_Heap_Bytes_Allocated", m.total_alloc)
    sink.emit("mem.com.Total_Stack_Allocation", m.stack_sys)
    sink.emit("mem.com.Other_Bytes_Allocation", m.other_sys)

    # heap
    sink.emit("mem.heap.Alloc", m.alloc)
    sink.emit("mem.heap.TotalAlloc", m.total_alloc)
    sink.emit("mem.heap.Mallocs", m.mallocs)
    sink.emit("mem.heap.Frees", m.frees)
    sink.emit("mem.heap.HeapAlloc", m.heap_alloc)
    sink.emit("mem.heap.HeapSys", m.heap_sys)
    sink.emit("mem.heap.HeapIdle", m.heap_idle)
    sink.emit("mem.heap.HeapInuse", m.heap_inuse)
    sink.emit("mem.heap.HeapReleased", m.heap_released)
    sink.emit("mem.heap.HeapObjects", m.heap_objects)

    # stack
    sink.emit("mem.stack.StackSys", m.stack_sys)
    sink.emit("mem.stack.StackInuse", m.stack_inuse)
    sink.emit("mem.stack.MSpanInuse", m.mspan_inuse)
    sink.emit("mem.stack.MSpanSys", m.mspan_sys)
    sink.emit("mem.stack.MCacheInuse", m.mcache_inuse)
    sink.emit("mem.stack.MCacheSys", m.mcache_sys)
