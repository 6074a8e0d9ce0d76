"""Recency window predicate applied to parsed entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .parser import FeedEntry


def _normalise(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def keep(entry: FeedEntry, reference_time: datetime, window: timedelta, enabled: bool) -> bool:
    """Return True unless the entry was published strictly before ``reference_time - window``."""

    if not enabled:
        return True
    cutoff = _normalise(reference_time) - window
    return not _normalise(entry.published) < cutoff


@dataclass(slots=True, frozen=True)
class TimeWindowFilter:
    """Bind window and flag once; the reference time stays a per-call argument."""

    window: timedelta = timedelta(hours=24)
    enabled: bool = False

    def keep(self, entry: FeedEntry, reference_time: datetime) -> bool:
        return keep(entry, reference_time, self.window, self.enabled)


__all__ = ["TimeWindowFilter", "keep"]
