"""Vendor history store readers.

Each reader takes a ProfileStoreRef and lazily yields RawRow values with the
vendor-native timestamp untouched. Supporting another browser means adding a
reader module and an entry in READERS.
"""

from __future__ import annotations

from typing import Callable, Iterator

from history_export.models import Browser, ProfileStoreRef, RawRow
from history_export.readers._sqlite import DEFAULT_LOCK_TIMEOUT
from history_export.readers.chrome import read_chrome
from history_export.readers.firefox import read_firefox
from history_export.readers.safari import read_safari

Reader = Callable[..., Iterator[RawRow]]

READERS: dict[Browser, Reader] = {
    Browser.CHROME: read_chrome,
    Browser.FIREFOX: read_firefox,
    Browser.SAFARI: read_safari,
}


def read(
    ref: ProfileStoreRef,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    snapshot_on_lock: bool = True,
) -> Iterator[RawRow]:
    """Read a located store with the reader registered for its browser."""
    return READERS[ref.browser](ref, lock_timeout=lock_timeout, snapshot_on_lock=snapshot_on_lock)


__all__ = [
    "READERS",
    "read",
    "read_chrome",
    "read_firefox",
    "read_safari",
]
