"""Shared fixtures: minimal on-disk browser history stores."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import pytest

# 2024-01-01T00:00:00Z in each vendor's native encoding.
NEW_YEAR_2024 = datetime(2024, 1, 1, tzinfo=timezone.utc)
CHROME_NEW_YEAR_2024 = 13348540800000000
FIREFOX_NEW_YEAR_2024 = 1704067200000000
SAFARI_NEW_YEAR_2024 = 725760000.0

FIXED_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_chrome_history(path: Path, visits) -> Path:
    """visits: iterable of (url, title, visit_time)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE urls (id INTEGER PRIMARY KEY, url TEXT, title TEXT, visit_count INTEGER)")
    conn.execute("CREATE TABLE visits (id INTEGER PRIMARY KEY, url INTEGER, visit_time INTEGER, transition INTEGER)")
    for i, (url, title, visit_time) in enumerate(visits, start=1):
        conn.execute("INSERT INTO urls VALUES (?, ?, ?, 1)", (i, url, title))
        conn.execute("INSERT INTO visits VALUES (?, ?, ?, 0)", (i, i, visit_time))
    conn.commit()
    conn.close()
    return path


def make_firefox_history(path: Path, visits) -> Path:
    """visits: iterable of (url, title, visit_date)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE moz_places (id INTEGER PRIMARY KEY, url TEXT, title TEXT, frecency INTEGER)")
    conn.execute(
        "CREATE TABLE moz_historyvisits (id INTEGER PRIMARY KEY, place_id INTEGER, visit_date INTEGER, visit_type INTEGER)"
    )
    for i, (url, title, visit_date) in enumerate(visits, start=1):
        conn.execute("INSERT INTO moz_places VALUES (?, ?, ?, 100)", (i, url, title))
        conn.execute("INSERT INTO moz_historyvisits VALUES (?, ?, ?, 1)", (i, i, visit_date))
    conn.commit()
    conn.close()
    return path


def make_safari_history(path: Path, visits, title_on: str | None = "visits") -> Path:
    """visits: iterable of (url, title, visit_time); title_on picks the table holding titles."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    item_title = ", title TEXT" if title_on == "items" else ""
    visit_title = ", title TEXT" if title_on == "visits" else ""
    conn.execute(f"CREATE TABLE history_items (id INTEGER PRIMARY KEY, url TEXT{item_title})")
    conn.execute(
        f"CREATE TABLE history_visits (id INTEGER PRIMARY KEY, history_item INTEGER, visit_time REAL{visit_title})"
    )
    for i, (url, title, visit_time) in enumerate(visits, start=1):
        if title_on == "items":
            conn.execute("INSERT INTO history_items VALUES (?, ?, ?)", (i, url, title))
        else:
            conn.execute("INSERT INTO history_items VALUES (?, ?)", (i, url))
        if title_on == "visits":
            conn.execute("INSERT INTO history_visits VALUES (?, ?, ?, ?)", (i, i, visit_time, title))
        else:
            conn.execute("INSERT INTO history_visits VALUES (?, ?, ?)", (i, i, visit_time))
    conn.commit()
    conn.close()
    return path


CHROME_BASE = Path("Library/Application Support/Google/Chrome")
FIREFOX_BASE = Path("Library/Application Support/Firefox/Profiles")
SAFARI_BASE = Path("Library/Safari")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "HOME",
        "LOCK_TIMEOUT",
        "WORKERS",
        "FUTURE_TOLERANCE_HOURS",
        "SNAPSHOT_ON_LOCK",
    ):
        monkeypatch.delenv(f"HISTORY_EXPORT_{name}", raising=False)


@pytest.fixture
def fake_home(tmp_path):
    """A home directory with two Chrome profiles, one Firefox profile and Safari."""
    home = tmp_path / "home"
    make_chrome_history(
        home / CHROME_BASE / "Default" / "History",
        [
            ("https://example.com/a", "A", CHROME_NEW_YEAR_2024),
            ("https://example.com/c", "C", CHROME_NEW_YEAR_2024 + 2_000_000),
        ],
    )
    make_chrome_history(
        home / CHROME_BASE / "Profile 1" / "History",
        [("https://work.example.com/", "Work", CHROME_NEW_YEAR_2024 + 3_000_000)],
    )
    make_chrome_history(
        home / CHROME_BASE / "System Profile" / "History",
        [("https://system.example.com/", "System", CHROME_NEW_YEAR_2024)],
    )
    make_firefox_history(
        home / FIREFOX_BASE / "x8a2kd0q.default-release" / "places.sqlite",
        [("https://mozilla.org/", "Mozilla", FIREFOX_NEW_YEAR_2024 + 1_000_000)],
    )
    make_safari_history(
        home / SAFARI_BASE / "History.db",
        [("https://apple.com/", "Apple", SAFARI_NEW_YEAR_2024 + 4.0)],
    )
    return home
