"""Unified exception hierarchy for history-export."""

from __future__ import annotations

from typing import Any


class HistoryExportError(Exception):
    """Base exception for all history-export errors."""


# Per-store (the store is skipped, the run continues)
class StoreError(HistoryExportError):
    """Base exception for failures scoped to one history store."""

    def __init__(self, message: str, path: str | None = None, browser: Any = None):
        super().__init__(message)
        self.path = path
        self.browser = browser


class LocatorIOError(StoreError):
    """A vendor base directory exists but cannot be enumerated."""


class StoreLockedError(StoreError):
    """A store could not be opened read-only within the lock timeout."""


class SchemaMismatchError(StoreError):
    """A store lacks the tables/columns its reader expects."""


# Per-record (the record is dropped and counted)
class RecordError(HistoryExportError):
    """Base exception for failures scoped to one visit record."""


class TimestampOutOfRange(RecordError):
    """A raw timestamp is missing or normalizes outside the sane window."""


class EmptyURLError(RecordError):
    """A visit row has no URL."""


# Fatal
class NoHistoryFoundError(HistoryExportError):
    """No history store could be read at all."""

    def __init__(self, message: str, summary: Any = None):
        super().__init__(message)
        self.summary = summary
