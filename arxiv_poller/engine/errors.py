"""Typed errors raised by the polling engine and its collaborators."""

from __future__ import annotations


class PollerError(Exception):
    """Base class for every typed failure surfaced by ``Poller.next``."""


class InvalidEndpoint(PollerError):
    """The configured base URL cannot be used to build a query."""

    def __init__(self, endpoint: str, reason: str = "") -> None:
        self.endpoint = endpoint
        message = f"invalid arXiv API URL: {endpoint!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class TransportError(PollerError):
    """Network failure or timeout while talking to the feed."""


class UpstreamError(PollerError):
    """The feed answered with a non-success status."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"arXiv API returned status {status}: {body}")


class MalformedFeedError(PollerError):
    """The payload is not a structurally valid feed document."""


class TimestampParseError(PollerError):
    """An entry timestamp matched none of the supported formats."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"failed to parse {field} date: {value!r}")


class Cancelled(PollerError):
    """The caller's cancellation signal fired while waiting for the rate budget."""


class NoRecordAvailable(Exception):
    """Nothing to emit after a fetch cycle; back off and call again later.

    Not a ``PollerError``: it plays the role ``queue.Empty`` plays for queues.
    """


__all__ = [
    "Cancelled",
    "InvalidEndpoint",
    "MalformedFeedError",
    "NoRecordAvailable",
    "PollerError",
    "TimestampParseError",
    "TransportError",
    "UpstreamError",
]
