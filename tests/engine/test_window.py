from __future__ import annotations

from datetime import datetime, timedelta, timezone

from arxiv_poller.engine import FeedEntry, TimeWindowFilter
from arxiv_poller.engine.window import keep

REFERENCE = datetime(2025, 6, 3, 12, 0, 0, tzinfo=timezone.utc)
WINDOW = timedelta(hours=24)


def _entry(published: datetime) -> FeedEntry:
    return FeedEntry(
        id="http://arxiv.org/abs/2401.00001v1",
        title="t",
        summary="s",
        authors=(),
        published=published,
        updated=published,
        categories=(),
        links=(),
    )


def test_disabled_filter_keeps_everything() -> None:
    ancient = _entry(datetime(1999, 1, 1, tzinfo=timezone.utc))
    assert keep(ancient, REFERENCE, WINDOW, enabled=False)


def test_entry_exactly_on_the_boundary_is_kept() -> None:
    assert keep(_entry(REFERENCE - WINDOW), REFERENCE, WINDOW, enabled=True)


def test_entry_before_the_boundary_is_dropped() -> None:
    just_before = REFERENCE - WINDOW - timedelta(seconds=1)
    assert not keep(_entry(just_before), REFERENCE, WINDOW, enabled=True)


def test_recent_and_future_entries_are_kept() -> None:
    assert keep(_entry(REFERENCE - timedelta(hours=1)), REFERENCE, WINDOW, enabled=True)
    assert keep(_entry(REFERENCE + timedelta(hours=1)), REFERENCE, WINDOW, enabled=True)


def test_naive_reference_time_is_treated_as_utc() -> None:
    naive_reference = REFERENCE.replace(tzinfo=None)
    assert keep(_entry(REFERENCE - WINDOW), naive_reference, WINDOW, enabled=True)


def test_bound_filter_delegates_to_predicate() -> None:
    window_filter = TimeWindowFilter(window=timedelta(hours=2), enabled=True)
    assert window_filter.keep(_entry(REFERENCE - timedelta(hours=1)), REFERENCE)
    assert not window_filter.keep(_entry(REFERENCE - timedelta(hours=3)), REFERENCE)
