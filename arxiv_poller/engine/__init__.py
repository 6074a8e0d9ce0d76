"""Engine components: fetch → parse → filter → map → buffer."""

from .client import FeedClient, FetchFunc, build_query_url
from .errors import (
    Cancelled,
    InvalidEndpoint,
    MalformedFeedError,
    NoRecordAvailable,
    PollerError,
    TimestampParseError,
    TransportError,
    UpstreamError,
)
from .mapper import ChangeRecord, Operation, RecordMapper
from .parser import Author, Category, FeedEntry, FeedParser, Link
from .poller import PollState, Poller, PollerState
from .rate_limit import RateBudget
from .window import TimeWindowFilter

__all__ = [
    "Author",
    "Cancelled",
    "Category",
    "ChangeRecord",
    "FeedClient",
    "FeedEntry",
    "FeedParser",
    "FetchFunc",
    "InvalidEndpoint",
    "Link",
    "MalformedFeedError",
    "NoRecordAvailable",
    "Operation",
    "PollState",
    "Poller",
    "PollerError",
    "PollerState",
    "RateBudget",
    "RecordMapper",
    "TimeWindowFilter",
    "TimestampParseError",
    "TransportError",
    "UpstreamError",
    "build_query_url",
]
