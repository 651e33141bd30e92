"""Runtime settings, read from HISTORY_EXPORT_* environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

ENV_PREFIX = "HISTORY_EXPORT_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env(name: str) -> str | None:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    value = _env(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {value!r}")
    if parsed < minimum:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {value!r}")
    return parsed


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}")
    if parsed < minimum:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {value!r}")
    return parsed


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    if value.lower() in _TRUE:
        return True
    if value.lower() in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")


def home_from_env() -> Path:
    """HISTORY_EXPORT_HOME, or the user's home directory."""
    home = _env("HOME")
    return Path(home).expanduser() if home else Path.home()


@dataclass
class Settings:
    """Settings for one export run.

    Args:
        home: Home directory the vendor base directories are resolved against.
        lock_timeout: Seconds to wait on a locked store before giving up.
        workers: Number of stores read concurrently; 1 reads sequentially.
        future_tolerance: How far past "now" a visit timestamp may lie.
        snapshot_on_lock: Retry a locked store from a temporary copy.
    """

    home: Path = field(default_factory=Path.home)
    lock_timeout: float = 5.0
    workers: int = 4
    future_tolerance: timedelta = timedelta(hours=24)
    snapshot_on_lock: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            home=home_from_env(),
            lock_timeout=_env_float("LOCK_TIMEOUT", 5.0),
            workers=_env_int("WORKERS", 4),
            future_tolerance=timedelta(hours=_env_float("FUTURE_TOLERANCE_HOURS", 24.0)),
            snapshot_on_lock=_env_bool("SNAPSHOT_ON_LOCK", True),
        )
