"""HTTP access to the arXiv query API."""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx
import structlog

from .errors import InvalidEndpoint, TransportError, UpstreamError

DEFAULT_USER_AGENT = "arxiv-poller/1.0"


class FetchFunc(Protocol):
    """Signature every fetch collaborator (and test double) must honour."""

    def __call__(
        self,
        endpoint_base: str,
        search_query: str,
        sort_by: str,
        sort_order: str,
        start: int,
        max_results: int,
    ) -> bytes: ...


def build_query_url(
    endpoint_base: str,
    search_query: str,
    sort_by: str,
    sort_order: str,
    start: int,
    max_results: int,
) -> str:
    """Return the query URL for one page; parameters are sorted by key."""

    try:
        parts = urlsplit(endpoint_base)
    except ValueError as exc:
        raise InvalidEndpoint(endpoint_base, str(exc)) from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidEndpoint(endpoint_base, "expected an absolute http(s) URL")

    params = {
        "search_query": search_query,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "start": str(start),
        "max_results": str(max_results),
    }
    query = urlencode(sorted(params.items()))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


class FeedClient:
    """Fetch raw feed pages, mapping every failure onto the typed error set."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("arxiv_poller.client")
        self._client = httpx.Client(follow_redirects=True, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def fetch(
        self,
        endpoint_base: str,
        search_query: str,
        sort_by: str,
        sort_order: str,
        start: int,
        max_results: int,
    ) -> bytes:
        url = build_query_url(endpoint_base, search_query, sort_by, sort_order, start, max_results)
        request_kwargs: dict[str, Any] = {
            "method": "GET",
            "url": url,
            "headers": {"User-Agent": self.user_agent},
            "timeout": self.timeout,
        }
        try:
            response = self._client.request(**request_kwargs)
        except httpx.InvalidURL as exc:
            raise InvalidEndpoint(endpoint_base, str(exc)) from exc
        except httpx.HTTPError as exc:
            self.logger.warning("fetch_error", url=url, error=str(exc))
            raise TransportError(f"failed to fetch from arXiv: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(response.status_code, response.text)
        return response.content


__all__ = ["DEFAULT_USER_AGENT", "FeedClient", "FetchFunc", "build_query_url"]
