"""Shared fixtures: configuration builders, canned feeds and a recording fetch double."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from arxiv_poller.config import PollerConfig

FIXED_NOW = datetime(2025, 6, 3, 12, 0, 0, tzinfo=timezone.utc)

SAMPLE_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/abs/2401.12345v1</id>
    <title>Sample Title</title>
    <summary>Sample Summary</summary>
    <author><name>Author One</name></author>
    <published>2025-06-01T00:00:00Z</published>
    <updated>2025-06-02T00:00:00Z</updated>
    <link href="http://arxiv.org/pdf/2401.12345v1.pdf" rel="alternate" type="application/pdf"/>
  </entry>
</feed>"""

EMPTY_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
</feed>"""


class FeedFactory:
    """Build Atom documents for tests."""

    sample = SAMPLE_FEED
    empty = EMPTY_FEED

    @staticmethod
    def entry(
        arxiv_id: str,
        title: str,
        published: str = "2025-06-01T00:00:00Z",
        updated: str | None = None,
        extra: str = "",
    ) -> str:
        return f"""
  <entry>
    <id>http://arxiv.org/abs/{arxiv_id}</id>
    <title>{title}</title>
    <summary>Summary of {title}</summary>
    <author><name>Author One</name></author>
    <published>{published}</published>
    <updated>{updated or published}</updated>{extra}
  </entry>"""

    @staticmethod
    def document(*entries: str) -> bytes:
        body = "".join(entries)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<feed xmlns="http://www.w3.org/2005/Atom">{body}\n</feed>'
        ).encode("utf-8")


@dataclass
class FetchCall:
    endpoint_base: str
    search_query: str
    sort_by: str
    sort_order: str
    start: int
    max_results: int


@dataclass
class RecordingFetch:
    """Fetch double replaying scripted responses; exceptions in the script are raised."""

    responses: list[Any] = field(default_factory=list)
    calls: list[FetchCall] = field(default_factory=list)
    default: bytes = EMPTY_FEED

    def __call__(
        self,
        endpoint_base: str,
        search_query: str,
        sort_by: str,
        sort_order: str,
        start: int,
        max_results: int,
    ) -> bytes:
        self.calls.append(
            FetchCall(endpoint_base, search_query, sort_by, sort_order, start, max_results)
        )
        response = self.responses.pop(0) if self.responses else self.default
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def starts(self) -> list[int]:
        return [call.start for call in self.calls]


@pytest.fixture
def sample_config() -> Callable[..., PollerConfig]:
    def _builder(**overrides: Any) -> PollerConfig:
        base: dict[str, Any] = {
            "api_url": "https://export.arxiv.org/api/query",
            "search_query": "AI",
            "max_results": 10,
            "polling_period": 0,
        }
        base.update(overrides)
        return PollerConfig(**base)

    return _builder


@pytest.fixture
def recording_fetch() -> Callable[..., RecordingFetch]:
    def _builder(*responses: Any, default: bytes = EMPTY_FEED) -> RecordingFetch:
        return RecordingFetch(responses=list(responses), default=default)

    return _builder


@pytest.fixture
def poller_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("ARXIV_POLLER_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def feeds() -> FeedFactory:
    return FeedFactory()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
