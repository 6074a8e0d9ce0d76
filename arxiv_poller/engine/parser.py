"""Atom feed decoding into normalised entries."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Sequence

from .errors import MalformedFeedError, TimestampParseError

TimestampStrategy = Callable[[str], datetime]


@dataclass(slots=True, frozen=True)
class Author:
    name: str


@dataclass(slots=True, frozen=True)
class Category:
    term: str
    scheme: str = ""


@dataclass(slots=True, frozen=True)
class Link:
    href: str
    type: str = ""
    rel: str = ""


@dataclass(slots=True, frozen=True)
class FeedEntry:
    """One paper as published by the upstream feed."""

    id: str
    title: str
    summary: str
    authors: tuple[Author, ...]
    published: datetime
    updated: datetime
    categories: tuple[Category, ...]
    links: tuple[Link, ...]


_RFC3339_PATTERN = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)
_NAIVE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}", re.ASCII)


def _parse_offset(text: str) -> timezone:
    if text in "zZ":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    hours, minutes = int(text[1:3]), int(text[4:6])
    if minutes > 59:
        raise ValueError(f"invalid UTC offset: {text!r}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_rfc3339(value: str) -> datetime:
    match = _RFC3339_PATTERN.fullmatch(value.strip())
    if match is None:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    parsed = datetime.strptime(f"{match['date']}T{match['time']}", "%Y-%m-%dT%H:%M:%S")
    # sub-microsecond digits are truncated
    fraction = (match["fraction"] or "").ljust(6, "0")[:6]
    return parsed.replace(microsecond=int(fraction), tzinfo=_parse_offset(match["offset"]))


def parse_naive_utc(value: str) -> datetime:
    # arXiv occasionally drops the trailing 'Z'
    text = value.strip()
    if _NAIVE_PATTERN.fullmatch(text) is None:
        raise ValueError(f"not a timestamp: {value!r}")
    parsed = datetime.strptime(text, "%Y-%m-%dT%H:%M:%S")
    return parsed.replace(tzinfo=timezone.utc)


DEFAULT_TIMESTAMP_STRATEGIES: tuple[TimestampStrategy, ...] = (parse_rfc3339, parse_naive_utc)


def parse_timestamp(
    field: str,
    value: str,
    strategies: Sequence[TimestampStrategy] = DEFAULT_TIMESTAMP_STRATEGIES,
) -> datetime:
    """Try each strategy in order; the first one that succeeds wins."""

    for strategy in strategies:
        try:
            return strategy(value)
        except ValueError:
            continue
    raise TimestampParseError(field, value)


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def _children(element: ET.Element, name: str) -> Iterable[ET.Element]:
    return (child for child in element if _local_name(child.tag) == name)


def _text(element: ET.Element, name: str) -> str:
    child = next(iter(_children(element, name)), None)
    if child is None:
        return ""
    return "".join(child.itertext())


class FeedParser:
    """Decode arXiv Atom payloads; a failure anywhere aborts the whole document."""

    def __init__(self, strategies: Sequence[TimestampStrategy] | None = None) -> None:
        self.strategies = tuple(strategies or DEFAULT_TIMESTAMP_STRATEGIES)

    def parse(self, raw: bytes | str) -> list[FeedEntry]:
        try:
            root = ET.fromstring(raw)
        except ET.ParseError as exc:
            raise MalformedFeedError(f"failed to parse XML response: {exc}") from exc
        if _local_name(root.tag) != "feed":
            raise MalformedFeedError(
                f"expected <feed> document root, got <{_local_name(root.tag)}>"
            )
        return [self._parse_entry(node) for node in _children(root, "entry")]

    def _parse_entry(self, node: ET.Element) -> FeedEntry:
        authors = tuple(Author(name=_text(author, "name")) for author in _children(node, "author"))
        categories = tuple(
            Category(term=cat.get("term", ""), scheme=cat.get("scheme", ""))
            for cat in _children(node, "category")
        )
        links = tuple(
            Link(href=link.get("href", ""), type=link.get("type", ""), rel=link.get("rel", ""))
            for link in _children(node, "link")
        )
        return FeedEntry(
            id=_text(node, "id"),
            title=_text(node, "title"),
            summary=_text(node, "summary"),
            authors=authors,
            published=parse_timestamp("published", _text(node, "published"), self.strategies),
            updated=parse_timestamp("updated", _text(node, "updated"), self.strategies),
            categories=categories,
            links=links,
        )


__all__ = [
    "Author",
    "Category",
    "DEFAULT_TIMESTAMP_STRATEGIES",
    "FeedEntry",
    "FeedParser",
    "Link",
    "parse_naive_utc",
    "parse_rfc3339",
    "parse_timestamp",
]
