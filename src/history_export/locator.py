"""Discovery of browser history stores, one per user profile."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from history_export.config import home_from_env
from history_export.exceptions import LocatorIOError
from history_export.models import Browser, ProfileStoreRef

logger = logging.getLogger(__name__)

FULL_DISK_ACCESS_HINT = (
    "Enable Full Disk Access for your terminal: "
    "System Settings > Privacy & Security > Full Disk Access."
)


@dataclass(frozen=True)
class VendorLayout:
    """Where a vendor keeps its profiles, relative to the user's home directory.

    ``profile_pattern`` of None means the store sits directly in the base
    directory (single-profile vendor).
    """

    bases: tuple[str, ...]
    store_name: str
    profile_pattern: re.Pattern | None = None
    excluded_profiles: frozenset[str] = frozenset()
    permission_hint: str = ""


LAYOUTS: dict[Browser, VendorLayout] = {
    Browser.CHROME: VendorLayout(
        bases=(
            "Library/Application Support/Google/Chrome",
            ".config/google-chrome",
        ),
        store_name="History",
        profile_pattern=re.compile(r"Default|Profile \d+|Guest Profile"),
        excluded_profiles=frozenset({"System Profile"}),
    ),
    Browser.FIREFOX: VendorLayout(
        bases=(
            "Library/Application Support/Firefox/Profiles",
            ".mozilla/firefox",
        ),
        store_name="places.sqlite",
        # <random salt>.<profile name>, e.g. "x8a2kd0q.default-release"
        profile_pattern=re.compile(r"[^.\s]+\..+"),
    ),
    Browser.SAFARI: VendorLayout(
        bases=("Library/Safari",),
        store_name="History.db",
        permission_hint=FULL_DISK_ACCESS_HINT,
    ),
}


def locate(browser: Browser, home: Path | None = None) -> Iterator[ProfileStoreRef]:
    """Yield a store reference for every profile of ``browser`` found under ``home``.

    Yields nothing if the browser is not installed. Raises LocatorIOError if a
    base directory exists but cannot be listed, after the stores under every
    other base have been yielded.
    """
    layout = LAYOUTS[browser]
    home = home if home is not None else home_from_env()
    errors: list[LocatorIOError] = []

    for relative in layout.bases:
        base = (home / relative).absolute()
        try:
            children = _list_base(browser, base, layout)
        except LocatorIOError as e:
            errors.append(e)
            continue
        if children is None:
            continue

        if layout.profile_pattern is None:
            store = base / layout.store_name
            if store in children and store.is_file():
                yield ProfileStoreRef(browser=browser, path=store, profile="Default")
            continue

        for child in children:
            if child.name in layout.excluded_profiles:
                continue
            if not layout.profile_pattern.fullmatch(child.name) or not child.is_dir():
                continue
            store = child / layout.store_name
            if store.is_file():
                yield ProfileStoreRef(browser=browser, path=store, profile=child.name)
            else:
                logger.debug("%s profile %s has no %s", browser, child, layout.store_name)

    if errors:
        raise errors[0]


def _list_base(browser: Browser, base: Path, layout: VendorLayout) -> list[Path] | None:
    """Return the sorted entries of a base directory, or None if it does not exist."""
    try:
        if not base.exists():
            logger.debug("%s base directory not found at %s", browser, base)
            return None
        if not base.is_dir():
            raise LocatorIOError(
                f"{browser} base path {base} is not a directory", path=str(base), browser=browser
            )
        return sorted(base.iterdir())
    except PermissionError as e:
        message = f"Cannot list {browser} directory {base}: permission denied."
        if layout.permission_hint:
            message = f"{message} {layout.permission_hint}"
        raise LocatorIOError(message, path=str(base), browser=browser) from e
    except OSError as e:
        raise LocatorIOError(
            f"Cannot list {browser} directory {base}: {e}", path=str(base), browser=browser
        ) from e
