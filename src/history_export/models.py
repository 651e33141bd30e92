"""Data models for the history export pipeline."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class Browser(str, Enum):
    """Closed set of supported browser families."""

    CHROME = "Chrome"
    FIREFOX = "Firefox"
    SAFARI = "Safari"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "Browser":
        """Look up a browser by tag, case-insensitively."""
        for browser in cls:
            if browser.value.lower() == name.strip().lower():
                return browser
        raise ValueError(f"Unknown browser {name!r}; expected one of {[b.value for b in cls]}")


@dataclass(frozen=True)
class VendorEpochSpec:
    """How a vendor encodes time: canonical = raw * scale + origin_offset (microseconds)."""

    origin_offset: int
    scale: int


@dataclass(frozen=True)
class ProfileStoreRef:
    """A located history store, opened read-only alongside a live browser."""

    browser: Browser
    path: Path
    profile: str = "Default"
    read_only: bool = True
    tolerate_writer: bool = True

    @property
    def uri(self) -> str:
        mode = "ro" if self.read_only else "rw"
        return f"{self.path.as_uri()}?mode={mode}"


@dataclass(frozen=True)
class RawRow:
    """One visit row as stored by the vendor, timestamp still in native units."""

    raw_timestamp: int | float | None
    url: str | None
    title: str | None


@dataclass(frozen=True)
class HistoryRecord:
    """A normalized browser history entry."""

    timestamp: datetime  # aware, UTC
    url: str
    title: str
    source_path: str
    browser: Browser


@dataclass
class SkippedStore:
    """A store that was skipped, and why."""

    path: str
    browser: Browser | None
    reason: str
    message: str


@dataclass
class RunSummary:
    """Counts accumulated over one export run."""

    stores_found: int = 0
    stores_read: int = 0
    rows_read: int = 0
    records: int = 0
    filtered: int = 0
    skipped_stores: list[SkippedStore] = field(default_factory=list)
    dropped: Counter = field(default_factory=Counter)

    @property
    def dropped_total(self) -> int:
        return sum(self.dropped.values())


@dataclass
class RunResult:
    """Sorted records plus the summary of the run that produced them."""

    records: list[HistoryRecord]
    summary: RunSummary
