"""Locate, read, normalize and merge history from every supported browser."""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from history_export.aggregator import Aggregator
from history_export.config import Settings
from history_export.exceptions import LocatorIOError, NoHistoryFoundError, RecordError, StoreError
from history_export.locator import locate
from history_export.models import (
    Browser,
    HistoryRecord,
    ProfileStoreRef,
    RunResult,
    RunSummary,
    SkippedStore,
)
from history_export.parser import normalize_record
from history_export.readers import read

logger = logging.getLogger(__name__)


@dataclass
class _StoreOutcome:
    ref: ProfileStoreRef
    rows_read: int = 0
    records: int = 0
    filtered: int = 0
    dropped: Counter = field(default_factory=Counter)
    error: StoreError | None = None


def run(
    browsers: Iterable[Browser] | None = None,
    settings: Settings | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    newest_first: bool = False,
    now: datetime | None = None,
) -> RunResult:
    """Export history from every located store as one ordered sequence.

    Stores that cannot be listed, opened or understood are skipped and
    reported in the summary; so are individual records with no URL or an
    implausible timestamp. Raises NoHistoryFoundError only when not a single
    store could be read.
    """
    settings = settings or Settings.from_env()
    selected = list(dict.fromkeys(browsers)) if browsers else list(Browser)
    now = now or datetime.now(timezone.utc)
    since = _as_utc(since)
    until = _as_utc(until)

    summary = RunSummary()
    refs = _locate_all(selected, settings, summary)
    summary.stores_found = len(refs)

    aggregator = Aggregator()

    def task(ref: ProfileStoreRef) -> _StoreOutcome:
        return _read_store(ref, settings, aggregator, now, since, until)

    if settings.workers > 1 and len(refs) > 1:
        with ThreadPoolExecutor(max_workers=settings.workers, thread_name_prefix="history-export") as pool:
            outcomes = list(pool.map(task, refs))
    else:
        outcomes = [task(ref) for ref in refs]

    for outcome in outcomes:
        if outcome.error is not None:
            summary.skipped_stores.append(_skipped(outcome.error, outcome.ref.browser, str(outcome.ref.path)))
            continue
        summary.stores_read += 1
        summary.rows_read += outcome.rows_read
        summary.filtered += outcome.filtered
        summary.dropped.update(outcome.dropped)

    records = aggregator.sorted(reverse=newest_first)
    summary.records = len(records)

    if summary.stores_read == 0:
        if summary.stores_found == 0:
            message = "No browser history stores found."
        else:
            message = f"None of the {summary.stores_found} browser history stores could be read."
        raise NoHistoryFoundError(message, summary=summary)

    logger.info(
        "Collected %d records from %d/%d stores (%d dropped, %d filtered)",
        summary.records,
        summary.stores_read,
        summary.stores_found,
        summary.dropped_total,
        summary.filtered,
    )
    return RunResult(records=records, summary=summary)


def _locate_all(browsers: list[Browser], settings: Settings, summary: RunSummary) -> list[ProfileStoreRef]:
    refs: list[ProfileStoreRef] = []
    for browser in browsers:
        try:
            for ref in locate(browser, settings.home):
                refs.append(ref)
        except LocatorIOError as e:
            logger.warning("Skipping %s: %s", browser, e)
            summary.skipped_stores.append(_skipped(e, browser, e.path or ""))
    return refs


def _read_store(
    ref: ProfileStoreRef,
    settings: Settings,
    aggregator: Aggregator,
    now: datetime,
    since: datetime | None,
    until: datetime | None,
) -> _StoreOutcome:
    """Read and normalize one store; its records reach the aggregator only if the whole store was read."""
    outcome = _StoreOutcome(ref=ref)
    batch: list[HistoryRecord] = []
    try:
        for raw in read(ref, lock_timeout=settings.lock_timeout, snapshot_on_lock=settings.snapshot_on_lock):
            outcome.rows_read += 1
            try:
                record = normalize_record(
                    raw, ref.browser, str(ref.path), now=now, future_tolerance=settings.future_tolerance
                )
            except RecordError as e:
                outcome.dropped[type(e).__name__] += 1
                logger.debug("Dropped record: %s", e)
                continue
            if (since and record.timestamp < since) or (until and record.timestamp > until):
                outcome.filtered += 1
                continue
            batch.append(record)
    except StoreError as e:
        logger.warning("Skipping %s store %s: %s", ref.browser, ref.path, e)
        return _StoreOutcome(ref=ref, error=e)

    outcome.records = aggregator.add(batch)
    logger.info(
        "Read %d visits from %s profile %r (%d dropped)",
        outcome.rows_read,
        ref.browser,
        ref.profile,
        sum(outcome.dropped.values()),
    )
    return outcome


def _skipped(error: StoreError, browser: Browser | None, path: str) -> SkippedStore:
    return SkippedStore(path=path, browser=browser, reason=type(error).__name__, message=str(error))


def _as_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
