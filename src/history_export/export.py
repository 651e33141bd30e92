"""CSV export of normalized history records."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

from history_export.models import HistoryRecord

logger = logging.getLogger(__name__)

HEADER = ["Timestamp", "URL", "Title", "History File", "Browser"]


def default_output_path(now: datetime | None = None, directory: Path | str = ".") -> Path:
    """browser_history_<local time>.csv in ``directory``."""
    now = now or datetime.now()
    return Path(directory) / f"browser_history_{now.strftime('%Y-%m-%d_%H-%M-%S')}.csv"


def format_timestamp(record: HistoryRecord) -> str:
    """RFC 3339 with an explicit UTC offset, e.g. 2023-11-14T22:13:20+00:00."""
    return record.timestamp.isoformat()


def write_csv(records: Iterable[HistoryRecord], path: Path | str) -> int:
    """Write records, in the given order, to ``path``; returns the row count."""
    path = Path(path)
    count = 0
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(HEADER)
        for record in records:
            writer.writerow([
                format_timestamp(record),
                record.url,
                record.title,
                record.source_path,
                record.browser.value,
            ])
            count += 1
    logger.info("Wrote %d records to %s", count, path)
    return count
