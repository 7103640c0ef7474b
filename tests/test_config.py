"""Tests for the configuration module."""

import pytest
import yaml

from rtstats.config import (
    CollectorConfig,
    RtStatsConfig,
    load_config,
    normalize_prefix,
    split_endpoint,
    validate_interval,
)
from rtstats.errors import ConfigError


def test_load_config_defaults(tmp_path):
    """Loading from a non-existent file returns defaults."""
    cfg = load_config(tmp_path / "missing.yaml")
    assert isinstance(cfg, RtStatsConfig)
    assert cfg.sink.kind == "statsd"
    assert cfg.sink.endpoint == "localhost:8125"
    assert cfg.sink.prefix == "pillar"
    assert cfg.collector.interval_seconds == 1
    assert cfg.collector.cpu is True
    assert cfg.collector.memory is True
    assert cfg.collector.gc is True
    assert cfg.collector.trace_allocations is False
    assert cfg.otel.endpoint == "http://localhost:4318"


def test_load_config_from_yaml(tmp_path):
    """Loading from a YAML file populates values."""
    data = {
        "sink": {"kind": "otel", "endpoint": "stats.internal:9125", "prefix": "api"},
        "collector": {"interval_seconds": 10, "cpu": False, "gc": False},
        "otel": {"endpoint": "http://otel:4318", "service_name": "api-runtime"},
    }
    path = tmp_path / "rtstats.yaml"
    path.write_text(yaml.dump(data), encoding="utf-8")

    cfg = load_config(path)
    assert cfg.sink.kind == "otel"
    assert cfg.sink.endpoint == "stats.internal:9125"
    assert cfg.sink.prefix == "api"
    assert cfg.collector.interval_seconds == 10
    assert cfg.collector.cpu is False
    assert cfg.collector.memory is True
    assert cfg.collector.gc is False
    assert cfg.otel.service_name == "api-runtime"


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "rtstats.yaml"
    path.write_text("collector:\n  network: true\n  cpu: false\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.collector == CollectorConfig(cpu=False)


def test_env_override(tmp_path, monkeypatch):
    """Environment variables override YAML values."""
    path = tmp_path / "rtstats.yaml"
    path.write_text(yaml.dump({"sink": {"prefix": "fromfile"}}), encoding="utf-8")

    monkeypatch.setenv("RTSTATS_PREFIX", "fromenv")
    monkeypatch.setenv("RTSTATS_ENDPOINT", "10.0.0.5:8125")
    monkeypatch.setenv("RTSTATS_INTERVAL", "5")
    monkeypatch.setenv("RTSTATS_MEMORY", "false")
    monkeypatch.setenv("RTSTATS_CPU", "1")
    cfg = load_config(path)
    assert cfg.sink.prefix == "fromenv"
    assert cfg.sink.endpoint == "10.0.0.5:8125"
    assert cfg.collector.interval_seconds == 5
    assert cfg.collector.memory is False
    assert cfg.collector.cpu is True


def test_env_interval_must_be_whole_seconds(tmp_path, monkeypatch):
    monkeypatch.setenv("RTSTATS_INTERVAL", "1.5")
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


def test_rejects_unknown_sink_kind(tmp_path):
    path = tmp_path / "rtstats.yaml"
    path.write_text("sink:\n  kind: carbon\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="carbon"):
        load_config(path)


def test_rejects_non_positive_interval(tmp_path):
    path = tmp_path / "rtstats.yaml"
    path.write_text("collector:\n  interval_seconds: 0\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_rejects_fractional_interval(tmp_path):
    path = tmp_path / "rtstats.yaml"
    path.write_text("collector:\n  interval_seconds: 1.5\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="whole number"):
        load_config(path)


class TestValidateInterval:
    def test_accepts_whole_seconds(self):
        assert validate_interval(3) == 3
        assert validate_interval(2.0) == 2

    @pytest.mark.parametrize("value", [0, -5, 0.25, True, None, "soon"])
    def test_rejects(self, value):
        with pytest.raises(ConfigError):
            validate_interval(value)


def test_empty_prefix_in_yaml_is_kept_empty(tmp_path):
    path = tmp_path / "rtstats.yaml"
    path.write_text("sink:\n  prefix:\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.sink.prefix == ""
    assert normalize_prefix(cfg.sink.prefix) == "go."


class TestNormalizePrefix:
    def test_empty_prefix_defaults_to_go(self):
        assert normalize_prefix("") == "go."

    def test_separator_is_appended(self):
        assert normalize_prefix("pillar") == "pillar."

    def test_is_idempotent(self):
        for raw in ("", "pillar", "a.b"):
            once = normalize_prefix(raw)
            assert normalize_prefix(once) == once


class TestSplitEndpoint:
    def test_host_and_port(self):
        assert split_endpoint("localhost:8125") == ("localhost", 8125)

    def test_bracketed_ipv6(self):
        assert split_endpoint("[::1]:8125") == ("::1", 8125)

    @pytest.mark.parametrize("endpoint", ["localhost", ":8125", "localhost:abc", "localhost:70000"])
    def test_malformed(self, endpoint):
        with pytest.raises(ConfigError):
            split_endpoint(endpoint)
