"""Merge browser history from Chrome, Firefox and Safari into one timeline."""

from history_export.aggregator import Aggregator, sort_records
from history_export.config import Settings
from history_export.epoch import normalize
from history_export.locator import locate
from history_export.models import (
    Browser,
    HistoryRecord,
    ProfileStoreRef,
    RawRow,
    RunResult,
    RunSummary,
    SkippedStore,
)
from history_export.parser import normalize_record
from history_export.pipeline import run
from history_export.readers import read

__all__ = [
    "Aggregator",
    "Browser",
    "HistoryRecord",
    "ProfileStoreRef",
    "RawRow",
    "RunResult",
    "RunSummary",
    "Settings",
    "SkippedStore",
    "locate",
    "normalize",
    "normalize_record",
    "read",
    "run",
    "sort_records",
]
