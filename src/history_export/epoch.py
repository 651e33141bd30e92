"""Conversion of vendor-native visit timestamps to UTC datetimes.

Every browser counts time from its own origin in its own unit:

- Chrome: integer microseconds since 1601-01-01 UTC (the Windows FILETIME origin).
- Firefox: integer microseconds since 1970-01-01 UTC (PRTime).
- Safari: float seconds since 2001-01-01 UTC (Core Data reference date).

All of them are mapped onto integer microseconds since the Unix epoch with
``canonical = raw * scale + origin_offset`` and then onto an aware ``datetime``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from history_export.exceptions import TimestampOutOfRange
from history_export.models import Browser, VendorEpochSpec

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Seconds from 1601-01-01 to 1970-01-01 (Chrome epoch).
CHROME_EPOCH_OFFSET = 11644473600
# Seconds from 1970-01-01 to 2001-01-01 (Safari/WebKit epoch).
APPLE_EPOCH_OFFSET = 978307200

MICROS_PER_SECOND = 1_000_000

EPOCH_SPECS: dict[Browser, VendorEpochSpec] = {
    Browser.CHROME: VendorEpochSpec(origin_offset=-CHROME_EPOCH_OFFSET * MICROS_PER_SECOND, scale=1),
    Browser.FIREFOX: VendorEpochSpec(origin_offset=0, scale=1),
    Browser.SAFARI: VendorEpochSpec(origin_offset=APPLE_EPOCH_OFFSET * MICROS_PER_SECOND, scale=MICROS_PER_SECOND),
}

# Nothing a browser recorded can predate this.
EARLIEST_VALID = datetime(1990, 1, 1, tzinfo=timezone.utc)
DEFAULT_FUTURE_TOLERANCE = timedelta(days=1)


def _micros_between(start: datetime, end: datetime) -> int:
    return (end - start) // timedelta(microseconds=1)


def to_micros(browser: Browser, raw_value) -> int:
    """Convert a raw vendor timestamp to microseconds since the Unix epoch.

    No range check is applied. Raises TimestampOutOfRange if the value is
    missing or not a finite number.
    """
    spec = EPOCH_SPECS[browser]
    if raw_value is None or isinstance(raw_value, bool):
        raise TimestampOutOfRange(f"{browser} visit has no timestamp")
    try:
        if isinstance(raw_value, int):
            scaled = raw_value * spec.scale
        else:
            scaled = round(float(raw_value) * spec.scale)
    except (TypeError, ValueError, OverflowError) as e:
        raise TimestampOutOfRange(f"{browser} timestamp {raw_value!r} is not a number") from e
    return scaled + spec.origin_offset


def normalize(
    browser: Browser,
    raw_value,
    *,
    now: datetime | None = None,
    future_tolerance: timedelta = DEFAULT_FUTURE_TOLERANCE,
) -> datetime:
    """Normalize a raw vendor timestamp to an aware UTC datetime.

    Raises TimestampOutOfRange when the instant falls before 1990 or later
    than ``now + future_tolerance``.
    """
    micros = to_micros(browser, raw_value)
    upper = (now or datetime.now(timezone.utc)) + future_tolerance
    low_micros = _micros_between(UNIX_EPOCH, EARLIEST_VALID)
    high_micros = _micros_between(UNIX_EPOCH, upper)
    if micros < low_micros or micros > high_micros:
        raise TimestampOutOfRange(
            f"{browser} timestamp {raw_value!r} is outside "
            f"{EARLIEST_VALID.isoformat()} .. {upper.isoformat()}"
        )
    return UNIX_EPOCH + timedelta(microseconds=micros)


def from_datetime(browser: Browser, dt: datetime) -> int | float:
    """Encode a datetime in the vendor's native unit and origin.

    Naive datetimes are taken as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    spec = EPOCH_SPECS[browser]
    micros = _micros_between(UNIX_EPOCH, dt) - spec.origin_offset
    if spec.scale == 1:
        return micros
    return micros / spec.scale
