"""Turn parsed feed entries into change records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping

from . import position as position_codec
from .parser import FeedEntry, Link

PDF_MIME_TYPE = "application/pdf"


class Operation(str, Enum):
    """Change kinds; this feed only ever produces creates."""

    CREATE = "create"


@dataclass(slots=True, frozen=True)
class ChangeRecord:
    """Unit handed to the consumer by ``Poller.next``."""

    operation: Operation
    position: str
    key: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # read-only views over private copies; list values become tuples
        payload = {
            name: tuple(value) if isinstance(value, list) else value
            for name, value in self.payload.items()
        }
        object.__setattr__(self, "payload", MappingProxyType(payload))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict[str, Any]:
        """Return a fresh JSON-ready mapping; mutating it never touches the record."""

        return {
            "operation": self.operation.value,
            "position": self.position,
            "key": self.key,
            "payload": {
                name: list(value) if isinstance(value, tuple) else value
                for name, value in self.payload.items()
            },
            "metadata": dict(self.metadata),
        }


def format_rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def extract_arxiv_id(entry_id: str) -> str:
    """``http://arxiv.org/abs/1234.5678v1`` -> ``1234.5678v1``."""

    return entry_id.rsplit("/", 1)[-1]


def select_pdf_link(links: tuple[Link, ...]) -> str | None:
    for link in links:
        if link.type == PDF_MIME_TYPE or (link.rel == "alternate" and link.type == ""):
            return link.href
    return None


class RecordMapper:
    """Pure transform from ``FeedEntry`` plus stream index to ``ChangeRecord``."""

    def __init__(
        self,
        include_pdf: bool = True,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.include_pdf = include_pdf
        self._now = now or (lambda: datetime.now(timezone.utc))

    def map(self, entry: FeedEntry, position: int) -> ChangeRecord:
        arxiv_id = extract_arxiv_id(entry.id)
        published = format_rfc3339(entry.published)
        payload: dict[str, Any] = {
            "arxiv_id": arxiv_id,
            "title": entry.title,
            "abstract": entry.summary,
            "authors": tuple(author.name for author in entry.authors),
            "published": published,
            "updated": format_rfc3339(entry.updated),
            "categories": tuple(category.term for category in entry.categories),
            "entry_url": entry.id,
        }
        if self.include_pdf:
            pdf_url = select_pdf_link(entry.links)
            if pdf_url:
                payload["pdf_url"] = pdf_url

        metadata = {
            "read_at": format_rfc3339(self._now()),
            "arxiv.id": arxiv_id,
            "arxiv.title": entry.title,
            "arxiv.published": published,
        }
        return ChangeRecord(
            operation=Operation.CREATE,
            position=position_codec.encode(position),
            key=arxiv_id,
            payload=payload,
            metadata=metadata,
        )


__all__ = [
    "ChangeRecord",
    "Operation",
    "PDF_MIME_TYPE",
    "RecordMapper",
    "extract_arxiv_id",
    "format_rfc3339",
    "select_pdf_link",
]
