"""Rate-limited, buffered polling of the arXiv feed.

``Poller.next`` serves records from an in-memory FIFO. When the buffer runs dry
it waits on the rate budget, fetches one page at the current offset, parses,
filters and maps it, and refills the buffer. A failed cycle leaves offset and
buffer untouched so the next call re-requests the same page.

A poller instance is meant for a single caller; callers sharing one across
threads must serialise ``next`` themselves.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Event
from typing import Callable

import structlog

from ..config import PollerConfig
from . import position as position_codec
from .client import FeedClient, FetchFunc
from .errors import NoRecordAvailable, PollerError
from .mapper import ChangeRecord, RecordMapper
from .parser import FeedParser
from .rate_limit import RateBudget
from .window import TimeWindowFilter


class PollerState(str, Enum):
    IDLE = "idle"
    RATE_WAIT = "rate_wait"
    FETCHING = "fetching"
    FILLING = "filling"
    DRAINING = "draining"


@dataclass(slots=True)
class PollState:
    """Process-local session state; only ``last_position`` matters across restarts."""

    offset: int = 0
    buffer: deque[ChangeRecord] = field(default_factory=deque)
    last_position: str = ""


class Poller:
    """Pull-based engine turning feed pages into a stream of change records."""

    def __init__(
        self,
        config: PollerConfig,
        fetch: FetchFunc | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("arxiv_poller.poller")
        self._injected_fetch = fetch
        self._owned_client: FeedClient | None = None
        self._fetch: FetchFunc | None = None
        self._clock = clock
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._parser = FeedParser()
        self._filter = TimeWindowFilter(
            window=config.recency_window, enabled=config.filter_last_24_hours
        )
        self._mapper = RecordMapper(include_pdf=config.include_pdf, now=self._now)
        self._budget: RateBudget | None = None
        self._state: PollState | None = None
        self.state = PollerState.IDLE

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def open(self, position: str | bytes | None = None) -> None:
        offset = position_codec.decode(position)
        if isinstance(position, bytes):
            position = position.decode("ascii", errors="replace")
        if self._injected_fetch is not None:
            self._fetch = self._injected_fetch
        else:
            # a fresh client per session; teardown closes it
            self._close_owned_client()
            self._owned_client = FeedClient(
                user_agent=self.config.user_agent,
                timeout=self.config.request_timeout,
                logger=self.logger,
            )
            self._fetch = self._owned_client.fetch
        self._state = PollState(offset=offset, last_position=position or "")
        self._budget = RateBudget(self.config.polling_period, clock=self._clock)
        self.state = PollerState.IDLE
        self.logger.info(
            "opening_session",
            search_query=self.config.search_query,
            offset=offset,
        )

    def teardown(self) -> None:
        self.logger.info("tearing_down")
        self._close_owned_client()
        self._fetch = None
        self._state = None
        self._budget = None
        self.state = PollerState.IDLE

    def _close_owned_client(self) -> None:
        if self._owned_client is not None:
            self._owned_client.close()
            self._owned_client = None

    def ack(self, position: str) -> None:
        self.logger.debug("got_ack", position=position)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    @property
    def offset(self) -> int:
        return self._require_state().offset

    @property
    def last_position(self) -> str:
        return self._require_state().last_position

    @property
    def pending(self) -> int:
        return len(self._require_state().buffer)

    def next(self, cancel: Event | None = None) -> ChangeRecord:
        """Return the next record.

        Raises ``NoRecordAvailable`` when a fetch cycle produced nothing,
        ``Cancelled`` when ``cancel`` fires during the rate-limit wait and any
        other ``PollerError`` when the page could not be fetched or decoded.
        """

        state = self._require_state()
        if not state.buffer:
            self._fill(state, cancel)
        if not state.buffer:
            self.state = PollerState.IDLE
            raise NoRecordAvailable("no new arXiv entries; retry later")

        record = state.buffer.popleft()
        state.last_position = record.position
        self.state = PollerState.DRAINING if state.buffer else PollerState.IDLE
        return record

    def _fill(self, state: PollState, cancel: Event | None) -> None:
        if self._budget is None or self._fetch is None:
            raise RuntimeError("poller is not open; call open() first")
        self.state = PollerState.RATE_WAIT
        try:
            self._budget.acquire(cancel)
        except PollerError:
            self.state = PollerState.IDLE
            raise

        offset = state.offset
        page_size = self.config.max_results
        self.state = PollerState.FETCHING
        self.logger.debug("fetching_page", offset=offset, page_size=page_size)
        try:
            raw = self._fetch(
                self.config.api_url,
                self.config.search_query,
                self.config.sort_by.value,
                self.config.sort_order.value,
                offset,
                page_size,
            )
            self.state = PollerState.FILLING
            entries = self._parser.parse(raw)
        except PollerError as exc:
            self.state = PollerState.IDLE
            self.logger.warning("fetch_failed", offset=offset, error=str(exc))
            raise

        reference_time = self._now()
        records = [
            self._mapper.map(entry, offset + index)
            for index, entry in enumerate(entries)
            if self._filter.keep(entry, reference_time)
        ]
        state.buffer.extend(records)
        # Filtered entries still count so they are never fetched again
        state.offset = offset + len(entries)
        self.logger.info(
            "page_filled",
            raw_count=len(entries),
            retained=len(records),
            offset=state.offset,
        )

    def _require_state(self) -> PollState:
        if self._state is None:
            raise RuntimeError("poller is not open; call open() first")
        return self._state


__all__ = ["PollState", "Poller", "PollerState"]
