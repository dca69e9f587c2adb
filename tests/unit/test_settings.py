"""Environment-driven settings."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from itinerizer.config import resolve_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("ITINERIZER_DATA_DIR", raising=False)
    settings = resolve_settings()
    assert settings.data_dir == Path("data") / "itineraries"
    assert settings.storage_backend == "json"
    assert settings.enable_warnings is True
    assert settings.enable_info is False
    assert settings.adjacency_window == dt.timedelta(minutes=30)


def test_rule_switches_from_env(monkeypatch):
    monkeypatch.setenv("RULES_DISABLED", "no_flight_overlap, REASONABLE_DURATION,")
    monkeypatch.setenv("RULES_ENABLED", "HOTEL_ACTIVITY_OVERLAP_ALLOWED")
    monkeypatch.setenv("RULES_ENABLE_WARNINGS", "false")
    monkeypatch.setenv("RULES_ENABLE_INFO", "1")

    config = resolve_settings().engine_config()

    assert config.disabled_rules == frozenset({"NO_FLIGHT_OVERLAP", "REASONABLE_DURATION"})
    assert config.enabled_rules == frozenset({"HOTEL_ACTIVITY_OVERLAP_ALLOWED"})
    assert config.enable_warnings is False
    assert config.enable_info is True


def test_storage_and_window(monkeypatch, tmp_path):
    monkeypatch.setenv("ITINERIZER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ITINERIZER_STORAGE", "MEMORY")
    monkeypatch.setenv("ADJACENCY_WINDOW_MINUTES", "45")
    settings = resolve_settings()
    assert settings.data_dir == tmp_path
    assert settings.storage_backend == "memory"
    assert settings.adjacency_window_minutes == 45


def test_invalid_window_falls_back(monkeypatch):
    monkeypatch.setenv("ADJACENCY_WINDOW_MINUTES", "soon")
    assert resolve_settings().adjacency_window_minutes == 30
