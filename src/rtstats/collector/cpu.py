"""CPU family: thread count and foreign function call count."""

from __future__ import annotations

import threading

from ..sink.base import GaugeSink
from .base import CpuStats


def read_cpu_stats() -> CpuStats:
    """Read the live thread count.

    CPython keeps no count of calls into C through ``ctypes`` or extension
    modules, so ``num_cgo_call`` is always 0; the gauge is still reported
    to keep the key set fixed.
    """
    return CpuStats(num_goroutine=threading.active_count())


def emit_cpu_stats(sink: GaugeSink, s: CpuStats) -> None:
    sink.emit("cpu.NumGoroutine", s.num_goroutine)
    sink.emit("cpu.NumCgoCall", s.num_cgo_call)
