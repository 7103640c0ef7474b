"""Tests for the rtstats command line."""

import signal
import time

import pytest

from rtstats import __version__
from rtstats.cli import main
from rtstats.collector.manager import Collector, CollectorState
from rtstats.config import CollectorConfig
from rtstats.sink.capture import CaptureSink


class RecordingSink(CaptureSink):
    def __init__(self):
        super().__init__()
        self.shutdown_called = False

    def shutdown(self):
        self.shutdown_called = True


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("RTSTATS_PREFIX", "RTSTATS_CPU", "RTSTATS_MEMORY", "RTSTATS_GC"):
        monkeypatch.delenv(name, raising=False)


def test_version(capsys):
    main(["version"])
    assert capsys.readouterr().out.strip() == f"rtstats {__version__}"


def test_collect_zeroes_and_shuts_down_on_interrupt(monkeypatch, capsys):
    sink = RecordingSink()
    collector = Collector(sink, CollectorConfig(interval_seconds=60))
    monkeypatch.setattr("rtstats.cli.initialize", lambda _cfg: collector)

    handlers = {}
    monkeypatch.setattr(
        "rtstats.cli.signal.signal",
        lambda signum, handler: handlers.__setitem__(signum, handler),
    )

    real_sleep = time.sleep

    def _sleep_then_interrupt(_seconds):
        deadline = time.monotonic() + 5
        while len(sink.emissions) < 32 and time.monotonic() < deadline:
            real_sleep(0.01)
        handlers[signal.SIGINT](signal.SIGINT, None)

    monkeypatch.setattr("rtstats.cli.time.sleep", _sleep_then_interrupt)

    main(["collect"])

    assert set(handlers) == {signal.SIGINT, signal.SIGTERM}
    assert collector.state is CollectorState.STOPPED
    assert sink.shutdown_called
    live, final = sink.emissions[:32], sink.emissions[32:]
    assert [k for k, _ in final] == [k for k, _ in live]
    assert len(final) == 32
    assert all(value == 0 for _, value in final)
    assert "gauges zeroed" in capsys.readouterr().out


def test_snapshot_plain(capsys):
    main(["snapshot", "--no-table"])
    lines = capsys.readouterr().out.splitlines()
    keys = [line.split()[0] for line in lines]
    assert keys[0] == "pillar.cpu.NumGoroutine"
    assert "pillar.mem.heap.Alloc" in keys
    assert keys[-1] == "pillar.mem.gc.NumGC"
    assert len(keys) == 32
    assert all(line.split()[1].isdigit() for line in lines)


def test_snapshot_honours_config(tmp_path, capsys):
    (tmp_path / "rtstats.yaml").write_text(
        "sink:\n  prefix: ''\ncollector:\n  memory: false\n",
        encoding="utf-8",
    )
    main(["snapshot", "--no-table"])
    keys = [line.split()[0] for line in capsys.readouterr().out.splitlines()]
    assert keys == ["go.cpu.NumGoroutine", "go.cpu.NumCgoCall"]


def test_snapshot_table(capsys):
    main(["snapshot"])
    out = capsys.readouterr().out
    assert "Runtime gauges" in out
    assert "pillar.mem.stack.StackSys" in out


def test_bad_config_exits_with_error(tmp_path, capsys):
    (tmp_path / "rtstats.yaml").write_text("sink:\n  kind: carbon\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc_info:
        main(["snapshot"])
    assert exc_info.value.code == 1
    assert "carbon" in capsys.readouterr().err


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
