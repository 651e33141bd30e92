"""Collect normalized records from every store and order them globally."""

from __future__ import annotations

import threading
from typing import Iterable

from history_export.models import HistoryRecord


def _sort_key(item: tuple[int, HistoryRecord]):
    seq, record = item
    return (record.timestamp, record.browser.value, record.source_path, seq)


def sort_records(records: Iterable[HistoryRecord], reverse: bool = False) -> list[HistoryRecord]:
    """Order records by timestamp, then browser, then source path, then input order."""
    ordered = [record for _, record in sorted(enumerate(records), key=_sort_key)]
    if reverse:
        ordered.reverse()
    return ordered


class Aggregator:
    """Thread-safe buffer of normalized records.

    Each ``add`` call appends its batch atomically, so records from one store
    keep their relative order even when stores are read concurrently.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[HistoryRecord] = []

    def add(self, records: Iterable[HistoryRecord]) -> int:
        """Append a batch; returns the number of records added."""
        batch = list(records)
        with self._lock:
            self._records.extend(batch)
        return len(batch)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def sorted(self, reverse: bool = False) -> list[HistoryRecord]:
        """Snapshot of the buffer in global chronological order."""
        with self._lock:
            records = list(self._records)
        return sort_records(records, reverse=reverse)
