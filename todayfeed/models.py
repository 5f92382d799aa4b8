from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping, Union


@dataclass(frozen=True)
class ContentItem:
    id: str
    publisher_id: str
    content_type: str
    publish_time: datetime
    title: str
    category: str | None = None
    url: str | None = None
    description: str | None = None
    image_url: str | None = None
    publisher_name: str | None = None
    domain: str | None = None


@dataclass(frozen=True)
class PublisherSource:
    publisher_id: str
    publisher_name: str
    category: str | None = None
    enabled: bool = True


@dataclass(frozen=True)
class ScoredItem:
    item: ContentItem
    score: float


@dataclass(frozen=True)
class CatalogDecodeResult:
    """Catalog items that decoded cleanly plus the number of records skipped."""

    items: tuple[ContentItem, ...] = ()
    dropped: int = 0


class Axis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class SponsorCard:
    item: ContentItem
    kind = "sponsor"


@dataclass(frozen=True)
class HeadlineCard:
    item: ContentItem
    kind = "headline"


@dataclass(frozen=True)
class HeadlinePairCard:
    items: tuple[ContentItem, ContentItem]
    kind = "headlinePair"


@dataclass(frozen=True)
class GroupCard:
    items: tuple[ContentItem, ...]
    title: str
    axis: Axis
    display_brand: bool = False
    kind = "group"


@dataclass(frozen=True)
class NumberedCard:
    """Ranked list card. Not produced by the current layout."""

    items: tuple[ContentItem, ...]
    title: str
    kind = "numbered"


Card = Union[SponsorCard, HeadlineCard, HeadlinePairCard, GroupCard, NumberedCard]


class LoadState(Enum):
    IDLE = "idle"
    LOADING_SOURCES = "loadingSources"
    LOADING_CATALOG = "loadingCatalog"
    READY = "ready"


@dataclass(frozen=True)
class FeedSnapshot:
    """Everything one load cycle produced. Replaced whole, never mutated."""

    sources: Mapping[str, PublisherSource] = field(default_factory=dict)
    ranked: tuple[ScoredItem, ...] = ()
    cards: tuple[Card, ...] = ()
    dropped: int = 0
    loaded_at: datetime | None = None


@dataclass(frozen=True)
class LoadResult:
    snapshot: FeedSnapshot
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cards(self) -> tuple[Card, ...]:
        return self.snapshot.cards
