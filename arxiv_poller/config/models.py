"""Pydantic models describing a polling session."""

from __future__ import annotations

import re
from datetime import timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

DEFAULT_API_URL = "https://export.arxiv.org/api/query"
MAX_PAGE_SIZE = 2000

_DURATION_PATTERN = re.compile(r"(?P<value>\d+)(?P<unit>ms|[smhd])", re.IGNORECASE)
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


class SortBy(str, Enum):
    """Sort fields understood by the arXiv API."""

    SUBMITTED_DATE = "submittedDate"
    LAST_UPDATED_DATE = "lastUpdatedDate"
    RELEVANCE = "relevance"


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


def parse_duration(value: Any) -> timedelta:
    """Accept timedelta, seconds, or strings such as ``100ms`` and ``1h30m``."""

    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError("duration expects seconds or a string like '1h30m'")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError("duration expects seconds or a string like '1h30m'")
    text = value.strip().lower()
    if not text:
        raise ValueError("duration cannot be empty")
    try:
        return timedelta(seconds=float(text))
    except (ValueError, OverflowError):
        pass
    total = timedelta()
    index = 0
    for match in _DURATION_PATTERN.finditer(text):
        if match.start() != index:
            raise ValueError(f"unsupported duration format: {value}")
        total += int(match.group("value")) * _DURATION_UNITS[match.group("unit").lower()]
        index = match.end()
    if index != len(text):
        raise ValueError(f"unsupported duration format: {value}")
    return total


def format_duration(value: timedelta) -> str:
    """Inverse of ``parse_duration`` down to millisecond precision."""

    remaining = round(value / _DURATION_UNITS["ms"])
    if remaining <= 0:
        return "0s"
    parts: list[str] = []
    for unit in ("d", "h", "m", "s", "ms"):
        size = round(_DURATION_UNITS[unit] / _DURATION_UNITS["ms"])
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)


class PollerConfig(BaseModel):
    """Settings for one polling session (one search query)."""

    api_url: str = DEFAULT_API_URL
    search_query: str = ""
    max_results: int = 100
    sort_by: SortBy = SortBy.SUBMITTED_DATE
    sort_order: SortOrder = SortOrder.DESCENDING
    polling_period: timedelta = Field(default=timedelta(hours=1))
    include_pdf: bool = True
    filter_last_24_hours: bool = False
    # Width of the recency window used when filter_last_24_hours is on
    recency_window: timedelta = Field(default=timedelta(hours=24))
    user_agent: str = "arxiv-poller/1.0"
    request_timeout: float = 30.0

    @field_validator("sort_by", mode="before")
    @classmethod
    def _check_sort_by(cls, value: Any) -> Any:
        if not isinstance(value, str) or value not in {item.value for item in SortBy}:
            raise ValueError("sort_by must be one of: submittedDate, lastUpdatedDate, relevance")
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _check_sort_order(cls, value: Any) -> Any:
        if not isinstance(value, str) or value not in {item.value for item in SortOrder}:
            raise ValueError("sort_order must be either ascending or descending")
        return value

    @field_validator("polling_period", "recency_window", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> timedelta:
        return parse_duration(value)

    @field_serializer("polling_period", "recency_window", when_used="json")
    def _dump_duration(self, value: timedelta) -> str:
        return format_duration(value)

    @model_validator(mode="after")
    def _validate_ranges(self) -> "PollerConfig":
        if not self.search_query.strip():
            raise ValueError("search_query is required")
        if self.max_results <= 0 or self.max_results > MAX_PAGE_SIZE:
            raise ValueError(f"max_results must be between 1 and {MAX_PAGE_SIZE}")
        if self.polling_period < timedelta():
            raise ValueError("polling_period must be >= 0")
        if self.recency_window <= timedelta():
            raise ValueError("recency_window must be > 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        return self


__all__ = [
    "DEFAULT_API_URL",
    "MAX_PAGE_SIZE",
    "PollerConfig",
    "SortBy",
    "SortOrder",
    "format_duration",
    "parse_duration",
]
