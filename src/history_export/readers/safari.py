"""Safari ``History.db`` store reader."""

from __future__ import annotations

from typing import Iterator

from history_export.models import ProfileStoreRef, RawRow
from history_export.readers._sqlite import DEFAULT_LOCK_TIMEOUT, iter_store_rows

SCHEMA = {
    "history_items": {"id", "url"},
    "history_visits": {"id", "history_item", "visit_time"},
}


def _build_query(columns: dict[str, set[str]]) -> str:
    # Older Safari versions keep the title on history_items only.
    if "title" in columns["history_visits"]:
        title_expr = "COALESCE(hv.title, '')"
    elif "title" in columns["history_items"]:
        title_expr = "COALESCE(hi.title, '')"
    else:
        title_expr = "''"

    # visit_time: float seconds since 2001-01-01 UTC
    return f"""
        SELECT
            hv.visit_time AS visit_time,
            hi.url AS url,
            {title_expr} AS title
        FROM history_visits hv
        JOIN history_items hi ON hi.id = hv.history_item
        ORDER BY hv.visit_time ASC, hv.id ASC
    """


def read_safari(
    ref: ProfileStoreRef,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    snapshot_on_lock: bool = True,
) -> Iterator[RawRow]:
    """Yield every visit recorded in Safari's history."""
    return iter_store_rows(ref, SCHEMA, _build_query, lock_timeout, snapshot_on_lock)
