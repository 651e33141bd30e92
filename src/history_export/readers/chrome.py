"""Chrome ``History`` store reader."""

from __future__ import annotations

from typing import Iterator

from history_export.models import ProfileStoreRef, RawRow
from history_export.readers._sqlite import DEFAULT_LOCK_TIMEOUT, iter_store_rows

SCHEMA = {
    "urls": {"id", "url", "title"},
    "visits": {"id", "url", "visit_time"},
}


def _build_query(columns: dict[str, set[str]]) -> str:
    # visit_time: microseconds since 1601-01-01 UTC
    return """
        SELECT
            v.visit_time AS visit_time,
            u.url AS url,
            COALESCE(u.title, '') AS title
        FROM visits v
        JOIN urls u ON u.id = v.url
        ORDER BY v.visit_time ASC, v.id ASC
    """


def read_chrome(
    ref: ProfileStoreRef,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    snapshot_on_lock: bool = True,
) -> Iterator[RawRow]:
    """Yield every visit recorded in a Chrome profile."""
    return iter_store_rows(ref, SCHEMA, _build_query, lock_timeout, snapshot_on_lock)
