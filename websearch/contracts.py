"""Data contracts for the web search pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class ChatMessage:
    """One transcript entry. Only `extra` is written to, by the attachment step."""

    text: str
    is_user: bool = False
    is_system: bool = False
    index: int = 0
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class RawHit:
    """Provider output normalized to a shared shape, duplicates not yet removed."""

    text_bits: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider call: a hit, or an empty hit plus the failure reason."""

    hit: RawHit
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, hit: RawHit) -> "ProviderResult":
        return cls(hit=hit)

    @classmethod
    def failed(cls, reason: str) -> "ProviderResult":
        return cls(hit=RawHit(), error=reason)


@dataclass(frozen=True)
class AggregatedResult:
    """Deduplicated, budget-constrained result. Empty text means "no result"."""

    text: str
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.text


@dataclass(frozen=True)
class CacheEntry:
    result: AggregatedResult
    timestamp_ms: int


@dataclass(frozen=True)
class VisitedPage:
    link: str
    text: str


@dataclass(frozen=True)
class VisitedImage:
    link: str
    path: str


class CycleState(str, Enum):
    """Terminal states of one orchestration cycle."""

    DISABLED = "disabled"
    DELEGATED = "delegated"
    EMPTY_CHAT = "empty_chat"
    UNAVAILABLE = "unavailable"
    NO_QUERY = "no_query"
    NO_RESULT = "no_result"
    PUBLISHED = "published"


@dataclass
class SearchCycleResult:
    """What one orchestration cycle did, for callers and logs."""

    state: CycleState
    query: str = ""
    text: str = ""
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    cache_hit: bool = False
    prompt: str = ""
    attachment: str | None = None
    image_attachments: list[str] = field(default_factory=list)
    error: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "query": self.query or None,
            "cache_hit": self.cache_hit,
            "link_count": len(self.links),
            "image_count": len(self.images),
            "attachment": self.attachment,
            "error": self.error,
        }


@dataclass
class SearchCommandResult:
    """Result of an explicit search command."""

    output: str
    result: AggregatedResult
    pages: list[VisitedPage] = field(default_factory=list)
