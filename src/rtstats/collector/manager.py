"""Collector that samples the runtime and reports gauges on an interval."""

from __future__ import annotations

import dataclasses
import enum
import logging
import threading
import time
import tracemalloc
from typing import Any

import psutil

from ..config import CollectorConfig, validate_interval
from ..errors import CollectorStateError
from ..sink.base import GaugeSink
from .base import CpuStats, MemStats
from .cpu import emit_cpu_stats, read_cpu_stats
from .gcstats import GcPauseTracker, emit_gc_stats
from .memory import emit_mem_stats, read_mem_stats

logger = logging.getLogger(__name__)


class CollectorState(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class Collector:
    """Periodically reads runtime statistics and reports them to a sink.

    A collector is single use: configure it, then either call :meth:`run`
    from a thread of your own or :meth:`start` / :meth:`stop`. The first
    emission pass happens as soon as the loop starts. When the loop ends
    every gauge it reports is sent once more with a value of zero, so
    dashboards do not keep showing the last reading after shutdown.
    """

    def __init__(self, sink: GaugeSink, config: CollectorConfig | None = None) -> None:
        self._sink = sink
        self._config = dataclasses.replace(config) if config else CollectorConfig()
        self._config.interval_seconds = validate_interval(self._config.interval_seconds)
        self._state = CollectorState.CREATED
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._done = self._stop_event
        self._thread: threading.Thread | None = None
        self._tracker = GcPauseTracker()
        self._process = psutil.Process()
        self._owns_tracemalloc = False

    @property
    def config(self) -> CollectorConfig:
        """A copy of the current configuration."""
        return dataclasses.replace(self._config)

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def sink(self) -> GaugeSink:
        return self._sink

    def configure(self, **changes: Any) -> None:
        """Change configuration fields; only allowed before the loop starts.

        Raises :class:`ConfigError` for an interval below one second and
        leaves the current configuration untouched.
        """
        with self._state_lock:
            if self._state is not CollectorState.CREATED:
                raise CollectorStateError(
                    f"Cannot reconfigure a collector that is {self._state.value}"
                )
            config = dataclasses.replace(self._config, **changes)
            config.interval_seconds = validate_interval(config.interval_seconds)
            self._config = config

    # -- emission passes ---------------------------------------------------

    def output_stats(self) -> None:
        """Read the runtime and emit every enabled gauge."""
        cfg = self._config
        if cfg.cpu:
            emit_cpu_stats(self._sink, read_cpu_stats())
        if cfg.memory:
            m = read_mem_stats(self._process, self._tracker)
            emit_mem_stats(self._sink, m)
            if cfg.gc:
                emit_gc_stats(self._sink, m)

    def zero_stats(self) -> None:
        """Emit every enabled gauge with a zero value."""
        cfg = self._config
        if cfg.cpu:
            emit_cpu_stats(self._sink, CpuStats())
        if cfg.memory:
            m = MemStats()
            emit_mem_stats(self._sink, m)
            if cfg.gc:
                emit_gc_stats(self._sink, m)

    def _output_safely(self) -> None:
        try:
            self.output_stats()
        except Exception:
            logger.exception("Emission pass failed")

    # -- lifecycle -----------------------------------------------------------

    def _enter_running(self, done: threading.Event) -> None:
        with self._state_lock:
            if self._state is not CollectorState.CREATED:
                raise CollectorStateError(
                    f"Collector is {self._state.value}; collectors are single use"
                )
            self._done = done
            self._state = CollectorState.RUNNING

        if self._config.memory and self._config.gc:
            self._tracker.start()
        if self._config.trace_allocations and not tracemalloc.is_tracing():
            tracemalloc.start()
            self._owns_tracemalloc = True

    def _leave_running(self) -> None:
        self._tracker.stop()
        if self._owns_tracemalloc:
            tracemalloc.stop()
            self._owns_tracemalloc = False
        with self._state_lock:
            self._state = CollectorState.STOPPED

    def run(self, done: threading.Event | None = None) -> None:
        """Collect until *done* is set, then zero the gauges and return.

        Without *done* the loop runs until :meth:`stop` is called or the
        process exits, so call this from its own thread. With *done*,
        :meth:`stop` ends the loop by setting *done*.
        """
        if done is None:
            done = self._stop_event
        self._enter_running(done)
        self._loop(done)

    def _loop(self, done: threading.Event) -> None:
        interval = float(self._config.interval_seconds)
        logger.info(
            "Collector running (interval=%ds, cpu=%s, memory=%s, gc=%s)",
            self._config.interval_seconds,
            self._config.cpu,
            self._config.memory,
            self._config.memory and self._config.gc,
        )
        try:
            self._output_safely()

            # Gauges are snapshots, so a tick that cannot be served on time
            # is dropped rather than queued.
            next_tick = time.monotonic() + interval
            while not done.wait(max(next_tick - time.monotonic(), 0.0)):
                self._output_safely()
                next_tick += interval
                now = time.monotonic()
                if next_tick <= now:
                    skipped = int((now - next_tick) // interval) + 1
                    next_tick += skipped * interval
                    logger.debug("Emission pass overran, dropped %d tick(s)", skipped)
        finally:
            try:
                self.zero_stats()
            except Exception:
                logger.exception("Zeroing pass failed")
            self._leave_running()
            logger.info("Collector stopped")

    def start(self) -> None:
        """Start collecting in a background daemon thread."""
        if self._thread is not None:
            return
        self._enter_running(self._stop_event)
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._stop_event,),
            name="rtstats-collector",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to finish and wait for the zeroing pass.

        Only a loop started with :meth:`start` is joined; a :meth:`run` on a
        caller's thread is signalled and left to return on its own.
        """
        self._stop_event.set()
        self._done.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
