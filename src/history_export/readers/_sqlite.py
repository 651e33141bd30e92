"""Read-only SQLite access shared by the vendor readers."""

from __future__ import annotations

import logging
import shutil
import sqlite3
import tempfile
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Callable, Iterator

from history_export.exceptions import SchemaMismatchError, StoreError, StoreLockedError
from history_export.models import ProfileStoreRef, RawRow

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0

# Table name -> columns the reader's query depends on.
Schema = dict[str, set[str]]
QueryBuilder = Callable[[dict[str, set[str]]], str]

_LOCK_MARKERS = ("locked", "busy")
_OPEN_MARKERS = ("unable to open", "authorization denied", "readonly")


def iter_store_rows(
    ref: ProfileStoreRef,
    schema: Schema,
    build_query: QueryBuilder,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    snapshot_on_lock: bool = True,
) -> Iterator[RawRow]:
    """Run a vendor query against a store and yield its rows lazily.

    The query must select ``visit_time``, ``url`` and ``title`` columns.
    If the live store stays locked past ``lock_timeout`` seconds and
    ``snapshot_on_lock`` is set, the query is retried against a temporary
    copy of the store.
    """
    with ExitStack() as stack:
        try:
            conn = stack.enter_context(_connect(ref.uri, ref, lock_timeout))
            cursor = _prepare(conn, ref, schema, build_query)
        except StoreLockedError as e:
            if not snapshot_on_lock:
                raise
            logger.info("%s store %s unavailable (%s); reading a snapshot copy", ref.browser, ref.path, e)
            snapshot = stack.enter_context(_snapshot(ref))
            conn = stack.enter_context(_connect(snapshot.as_uri(), ref, lock_timeout))
            cursor = _prepare(conn, ref, schema, build_query)

        try:
            for row in cursor:
                yield RawRow(raw_timestamp=row["visit_time"], url=row["url"], title=row["title"])
        except sqlite3.Error as e:
            raise _translate(e, ref) from e


def table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    """Column names of ``table``; empty if the table does not exist."""
    return {str(row["name"]) for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}


def _decode_text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


@contextmanager
def _connect(uri: str, ref: ProfileStoreRef, lock_timeout: float) -> Iterator[sqlite3.Connection]:
    try:
        conn = sqlite3.connect(uri, uri=True, timeout=lock_timeout)
    except sqlite3.Error as e:
        raise StoreLockedError(
            f"Cannot open {ref.browser} history at {ref.path} read-only: {e}",
            path=str(ref.path),
            browser=ref.browser,
        ) from e
    conn.row_factory = sqlite3.Row
    # Titles (and occasionally URLs) can hold malformed UTF-8.
    conn.text_factory = _decode_text
    try:
        yield conn
    finally:
        conn.close()


def _prepare(
    conn: sqlite3.Connection,
    ref: ProfileStoreRef,
    schema: Schema,
    build_query: QueryBuilder,
) -> sqlite3.Cursor:
    """Check the store's schema and start the vendor query."""
    try:
        columns = {table: table_columns(conn, table) for table in schema}
    except sqlite3.Error as e:
        raise _translate(e, ref) from e

    missing = []
    for table, required in sorted(schema.items()):
        if not columns[table]:
            missing.append(table)
            continue
        missing.extend(f"{table}.{column}" for column in sorted(required - columns[table]))
    if missing:
        raise SchemaMismatchError(
            f"{ref.browser} history at {ref.path} is missing {', '.join(missing)} "
            "(unsupported browser version?)",
            path=str(ref.path),
            browser=ref.browser,
        )

    try:
        return conn.execute(build_query(columns))
    except sqlite3.Error as e:
        raise _translate(e, ref) from e


def _translate(error: sqlite3.Error, ref: ProfileStoreRef) -> StoreError:
    """Map a sqlite3 failure onto the per-store error taxonomy."""
    message = str(error).lower()
    if isinstance(error, sqlite3.OperationalError) and any(
        marker in message for marker in _LOCK_MARKERS + _OPEN_MARKERS
    ):
        return StoreLockedError(
            f"{ref.browser} history at {ref.path} is not readable: {error}",
            path=str(ref.path),
            browser=ref.browser,
        )
    return SchemaMismatchError(
        f"{ref.browser} history at {ref.path} is not a readable history database: {error}",
        path=str(ref.path),
        browser=ref.browser,
    )


@contextmanager
def _snapshot(ref: ProfileStoreRef) -> Iterator[Path]:
    """Copy a store (and its journal files) to a temporary directory."""
    with tempfile.TemporaryDirectory(prefix="history-export-") as tmp:
        target = Path(tmp) / ref.path.name
        try:
            shutil.copy2(ref.path, target)
            for suffix in ("-wal", "-journal"):
                sibling = ref.path.with_name(ref.path.name + suffix)
                if sibling.exists():
                    shutil.copy2(sibling, target.with_name(target.name + suffix))
        except OSError as e:
            raise StoreLockedError(
                f"Failed to copy {ref.browser} history at {ref.path}: {e}",
                path=str(ref.path),
                browser=ref.browser,
            ) from e
        yield target
