"""Normalize raw vendor rows into HistoryRecord values."""

from __future__ import annotations

from datetime import datetime, timedelta

from history_export.epoch import DEFAULT_FUTURE_TOLERANCE, normalize
from history_export.exceptions import EmptyURLError
from history_export.models import Browser, HistoryRecord, RawRow


def normalize_record(
    raw: RawRow,
    browser: Browser,
    source_path: str,
    now: datetime | None = None,
    future_tolerance: timedelta = DEFAULT_FUTURE_TOLERANCE,
) -> HistoryRecord:
    """Convert one raw row into a HistoryRecord.

    Raises EmptyURLError for rows without a URL and lets TimestampOutOfRange
    from the epoch conversion propagate; callers drop and count both.
    """
    url = (raw.url or "").strip()
    if not url:
        raise EmptyURLError(f"{browser} visit in {source_path} has no URL")

    timestamp = normalize(browser, raw.raw_timestamp, now=now, future_tolerance=future_tolerance)
    title = (raw.title or "").strip()

    return HistoryRecord(
        timestamp=timestamp,
        url=url,
        title=title,
        source_path=str(source_path),
        browser=browser,
    )
