from __future__ import annotations

import httpx
import pytest

from arxiv_poller.engine import (
    FeedClient,
    InvalidEndpoint,
    TransportError,
    UpstreamError,
    build_query_url,
)

API = "https://export.arxiv.org/api/query"


def test_build_query_url_basic() -> None:
    url = build_query_url(API, "AI", "submittedDate", "descending", 0, 10)
    assert url == (
        "https://export.arxiv.org/api/query?max_results=10&search_query=AI"
        "&sortBy=submittedDate&sortOrder=descending&start=0"
    )


def test_build_query_url_encodes_complex_queries() -> None:
    url = build_query_url(
        API, "ti:artificial intelligence AND cat:cs.AI", "lastUpdatedDate", "ascending", 100, 50
    )
    assert url == (
        "https://export.arxiv.org/api/query?max_results=50"
        "&search_query=ti%3Aartificial+intelligence+AND+cat%3Acs.AI"
        "&sortBy=lastUpdatedDate&sortOrder=ascending&start=100"
    )


def test_build_query_url_replaces_existing_query() -> None:
    url = build_query_url(API + "?stale=1", "AI", "relevance", "ascending", 5, 1)
    assert "stale" not in url
    assert url.endswith("start=5")


@pytest.mark.parametrize("endpoint", ["://invalid-url", "", "export.arxiv.org/api/query", "ftp://host/x"])
def test_build_query_url_rejects_bad_endpoints(endpoint: str) -> None:
    with pytest.raises(InvalidEndpoint) as excinfo:
        build_query_url(endpoint, "AI", "submittedDate", "descending", 0, 10)
    assert excinfo.value.endpoint == endpoint


def test_fetch_returns_body_and_sends_user_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    client = FeedClient(user_agent="test-agent/2.0", timeout=5)
    captured: dict = {}

    def fake_request(**kwargs):
        captured.update(kwargs)
        request = httpx.Request(kwargs["method"], kwargs["url"])
        return httpx.Response(200, request=request, content=b"<feed/>")

    monkeypatch.setattr(client._client, "request", fake_request)
    body = client.fetch(API, "AI", "submittedDate", "descending", 20, 10)
    client.close()

    assert body == b"<feed/>"
    assert captured["method"] == "GET"
    assert captured["headers"] == {"User-Agent": "test-agent/2.0"}
    assert captured["timeout"] == 5
    assert "start=20" in captured["url"]
    assert "max_results=10" in captured["url"]


def test_fetch_raises_upstream_error_on_bad_status(monkeypatch: pytest.MonkeyPatch) -> None:
    client = FeedClient()

    def fake_request(**kwargs):
        request = httpx.Request(kwargs["method"], kwargs["url"])
        return httpx.Response(500, request=request, text="Internal Server Error")

    monkeypatch.setattr(client._client, "request", fake_request)
    with pytest.raises(UpstreamError) as excinfo:
        client.fetch(API, "AI", "submittedDate", "descending", 0, 10)
    client.close()
    assert excinfo.value.status == 500
    assert excinfo.value.body == "Internal Server Error"


@pytest.mark.parametrize(
    "failure",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("too slow"),
    ],
)
def test_fetch_wraps_transport_failures(monkeypatch: pytest.MonkeyPatch, failure: Exception) -> None:
    client = FeedClient()

    def failing_request(**_kwargs):
        raise failure

    monkeypatch.setattr(client._client, "request", failing_request)
    with pytest.raises(TransportError) as excinfo:
        client.fetch(API, "AI", "submittedDate", "descending", 0, 10)
    client.close()
    assert excinfo.value.__cause__ is failure


def test_fetch_invalid_endpoint_never_hits_network(monkeypatch: pytest.MonkeyPatch) -> None:
    client = FeedClient()

    def unexpected(**_kwargs):
        raise AssertionError("network must not be touched")

    monkeypatch.setattr(client._client, "request", unexpected)
    with pytest.raises(InvalidEndpoint):
        client.fetch("://invalid-url", "AI", "submittedDate", "descending", 0, 10)
    client.close()
