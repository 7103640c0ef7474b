"""CLI interface for rtstats."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import time

from . import __version__
from .collector.manager import Collector
from .config import load_config, normalize_prefix
from .core import initialize
from .errors import RtStatsError
from .sink.capture import CaptureSink

logger = logging.getLogger(__name__)


def _cmd_collect(args: argparse.Namespace) -> None:
    """Report runtime gauges until interrupted."""
    cfg = load_config(args.config)
    collector = initialize(cfg)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    collector.start()
    print(
        f"rtstats collector running (sink={cfg.sink.kind} → {cfg.sink.endpoint}, "
        f"interval={cfg.collector.interval_seconds}s)"
    )
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        collector.stop()
        collector.sink.shutdown()
    print("\nCollection stopped; gauges zeroed.")


def print_snapshot(emissions: list[tuple[str, int]], prefix: str) -> None:
    """Pretty-print one emission pass using Rich."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Runtime gauges")
    table.add_column("Key", style="green")
    table.add_column("Value", justify="right", style="cyan")

    for key, value in emissions:
        table.add_row(prefix + key, str(value))

    Console().print(table)


def _cmd_snapshot(args: argparse.Namespace) -> None:
    """Run a single emission pass and print it instead of sending it."""
    cfg = load_config(args.config)
    sink = CaptureSink()
    Collector(sink, cfg.collector).output_stats()

    prefix = normalize_prefix(cfg.sink.prefix)
    if args.no_table:
        for key, value in sink.emissions:
            print(f"{prefix}{key} {value}")
    else:
        print_snapshot(sink.emissions, prefix)


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"rtstats {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the rtstats CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        prog="rtstats",
        description="Report Python runtime statistics as gauges",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to rtstats.yaml")
    sub = parser.add_subparsers(dest="command")

    # collect
    collect_p = sub.add_parser("collect", help="Send runtime gauges until interrupted")
    collect_p.set_defaults(func=_cmd_collect)

    # snapshot
    snap_p = sub.add_parser("snapshot", help="Print one set of runtime gauges")
    snap_p.add_argument("--no-table", action="store_true", help="Print plain 'key value' lines")
    snap_p.set_defaults(func=_cmd_snapshot)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except RtStatsError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"rtstats: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
