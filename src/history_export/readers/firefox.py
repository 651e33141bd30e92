"""Firefox ``places.sqlite`` store reader."""

from __future__ import annotations

from typing import Iterator

from history_export.models import ProfileStoreRef, RawRow
from history_export.readers._sqlite import DEFAULT_LOCK_TIMEOUT, iter_store_rows

SCHEMA = {
    "moz_places": {"id", "url", "title"},
    "moz_historyvisits": {"id", "place_id", "visit_date"},
}


def _build_query(columns: dict[str, set[str]]) -> str:
    # visit_date: PRTime, microseconds since 1970-01-01 UTC.
    # about: and place: entries are internal pages and bookmark queries, not visits.
    return """
        SELECT
            h.visit_date AS visit_time,
            p.url AS url,
            COALESCE(p.title, p.url) AS title
        FROM moz_historyvisits h
        JOIN moz_places p ON p.id = h.place_id
        WHERE p.url NOT LIKE 'about:%'
          AND p.url NOT LIKE 'place:%'
        ORDER BY h.visit_date ASC, h.id ASC
    """


def read_firefox(
    ref: ProfileStoreRef,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    snapshot_on_lock: bool = True,
) -> Iterator[RawRow]:
    """Yield every visit recorded in a Firefox profile."""
    return iter_store_rows(ref, SCHEMA, _build_query, lock_timeout, snapshot_on_lock)
