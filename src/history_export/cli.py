"""Command line entry point: ``history-export``."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import dateutil.parser as date_parser

from history_export.config import Settings
from history_export.exceptions import NoHistoryFoundError
from history_export.export import default_output_path, write_csv
from history_export.models import Browser, RunSummary
from history_export.pipeline import run

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> datetime:
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}: {e}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_browser(value: str) -> Browser:
    try:
        return Browser.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="history-export",
        description="Export Chrome, Firefox and Safari history as one chronological CSV.",
    )
    parser.add_argument("-o", "--output", type=Path, metavar="PATH",
                        help="CSV file to write (default: browser_history_<timestamp>.csv)")
    parser.add_argument("-b", "--browser", type=_parse_browser, action="append", dest="browsers",
                        metavar="NAME", help="Only read this browser (repeatable): chrome, firefox, safari")
    parser.add_argument("--since", type=_parse_date, metavar="DATE",
                        help="Skip visits before this date (naive dates are UTC)")
    parser.add_argument("--until", type=_parse_date, metavar="DATE",
                        help="Skip visits after this date (naive dates are UTC)")
    parser.add_argument("--newest-first", action="store_true",
                        help="Write the most recent visit first")

    tuning = parser.add_argument_group("Store access")
    tuning.add_argument("--workers", type=int, metavar="N",
                        help="Stores read concurrently (env HISTORY_EXPORT_WORKERS)")
    tuning.add_argument("--lock-timeout", type=float, metavar="SECONDS",
                        help="Wait on a locked store (env HISTORY_EXPORT_LOCK_TIMEOUT)")
    tuning.add_argument("--no-snapshot", action="store_true",
                        help="Skip locked stores instead of reading a temporary copy")
    tuning.add_argument("--home", type=Path, metavar="DIR",
                        help="Home directory to search (env HISTORY_EXPORT_HOME)")

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {}
    if args.workers is not None:
        overrides["workers"] = max(1, args.workers)
    if args.lock_timeout is not None:
        overrides["lock_timeout"] = max(0.0, args.lock_timeout)
    if args.no_snapshot:
        overrides["snapshot_on_lock"] = False
    if args.home is not None:
        overrides["home"] = args.home.expanduser()
    return replace(settings, **overrides)


def format_summary(summary: RunSummary) -> str:
    lines = [f"Stores read: {summary.stores_read}/{summary.stores_found}"]
    if summary.skipped_stores:
        lines.append(f"Skipped stores: {len(summary.skipped_stores)}")
        for skipped in summary.skipped_stores:
            lines.append(f"  [{skipped.browser}] {skipped.reason}: {skipped.message}")
    if summary.dropped:
        lines.append(f"Dropped records: {summary.dropped_total}")
        for reason, count in sorted(summary.dropped.items()):
            lines.append(f"  {reason}: {count}")
    if summary.filtered:
        lines.append(f"Outside date range: {summary.filtered}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = _settings_from_args(args)
    except ValueError as e:
        parser.error(str(e))
    logger.debug("Running with %s", settings)
    if args.since and args.until and args.since > args.until:
        parser.error("--since must not be later than --until")

    try:
        result = run(
            browsers=args.browsers,
            settings=settings,
            since=args.since,
            until=args.until,
            newest_first=args.newest_first,
        )
    except NoHistoryFoundError as e:
        print(f"No browser history exported: {e}", file=sys.stderr)
        if e.summary is not None:
            print(format_summary(e.summary), file=sys.stderr)
        return 1

    output = args.output or default_output_path()
    try:
        count = write_csv(result.records, output)
    except OSError as e:
        print(f"Failed to write {output}: {e}", file=sys.stderr)
        return 1

    print(format_summary(result.summary))
    print(f"Exported {count} visits to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
