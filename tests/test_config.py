"""Tests for environment-driven settings."""

from datetime import timedelta
from pathlib import Path

import pytest

from history_export.config import Settings, home_from_env


def test_defaults():
    settings = Settings.from_env()
    assert settings.home == Path.home()
    assert settings.lock_timeout == 5.0
    assert settings.workers == 4
    assert settings.future_tolerance == timedelta(hours=24)
    assert settings.snapshot_on_lock is True


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HISTORY_EXPORT_HOME", str(tmp_path))
    monkeypatch.setenv("HISTORY_EXPORT_LOCK_TIMEOUT", "0.5")
    monkeypatch.setenv("HISTORY_EXPORT_WORKERS", "1")
    monkeypatch.setenv("HISTORY_EXPORT_FUTURE_TOLERANCE_HOURS", "2")
    monkeypatch.setenv("HISTORY_EXPORT_SNAPSHOT_ON_LOCK", "off")
    settings = Settings.from_env()
    assert settings.home == tmp_path
    assert settings.lock_timeout == 0.5
    assert settings.workers == 1
    assert settings.future_tolerance == timedelta(hours=2)
    assert settings.snapshot_on_lock is False


@pytest.mark.parametrize(
    "name, value",
    [
        ("LOCK_TIMEOUT", "soon"),
        ("LOCK_TIMEOUT", "-1"),
        ("WORKERS", "0"),
        ("WORKERS", "2.5"),
        ("SNAPSHOT_ON_LOCK", "maybe"),
    ],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(f"HISTORY_EXPORT_{name}", value)
    with pytest.raises(ValueError, match=f"HISTORY_EXPORT_{name}"):
        Settings.from_env()


def test_home_from_env_ignores_other_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("HISTORY_EXPORT_HOME", str(tmp_path))
    monkeypatch.setenv("HISTORY_EXPORT_LOCK_TIMEOUT", "soon")
    assert home_from_env() == tmp_path
