"""Arrange ranked items into the card layout shown on the feed.

Layout of one load cycle:

    sponsor
    headline                       latest article
    group "Deals" (horizontal)     up to 3 offers
    headline, headline             next 6 articles
    headlinePair, headlinePair
    group <category> (vertical)    up to 3 articles of one category
    sponsor
    group "Deals" (horizontal)     up to 3 offers

Every slot draws from the front of its pool and is left out when the pool
cannot fill it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from todayfeed.config import settings
from todayfeed.models import (
    Axis,
    Card,
    ContentItem,
    GroupCard,
    HeadlineCard,
    HeadlinePairCard,
    ScoredItem,
    SponsorCard,
)

logger = logging.getLogger(__name__)

DEALS_TITLE = "Deals"
GROUP_SIZE = 3
LATEST_BLOCK_SIZE = 6


@dataclass
class _Pools:
    deals: list[ContentItem] = field(default_factory=list)
    sponsors: list[ContentItem] = field(default_factory=list)
    articles: list[ContentItem] = field(default_factory=list)
    # Images are partitioned but no card slot takes them yet.
    media: list[ContentItem] = field(default_factory=list)


def _partition(ranked: Sequence[ScoredItem], deals_publisher_id: str) -> _Pools:
    """Split the ranked list into pools. An item may land in several."""
    pools = _Pools()
    for scored in ranked:
        item = scored.item
        if item.publisher_id == deals_publisher_id:
            pools.deals.append(item)
        if item.content_type == "product":
            pools.sponsors.append(item)
        elif item.content_type == "article":
            pools.articles.append(item)
        elif item.content_type == "image":
            pools.media.append(item)
    return pools


def _take(pool: list[ContentItem], count: int) -> list[ContentItem]:
    taken = pool[:count]
    del pool[:count]
    return taken


def _deals_group(pools: _Pools) -> GroupCard | None:
    items = _take(pools.deals, GROUP_SIZE)
    if not items:
        return None
    return GroupCard(items=tuple(items), title=DEALS_TITLE, axis=Axis.HORIZONTAL, display_brand=False)


def _latest_block(pools: _Pools) -> list[Card]:
    if len(pools.articles) < LATEST_BLOCK_SIZE:
        logger.debug(
            "Only %d articles left, skipping the latest-articles block",
            len(pools.articles),
        )
        return []
    a, b, c, d, e, f = _take(pools.articles, LATEST_BLOCK_SIZE)
    return [
        HeadlineCard(a),
        HeadlineCard(b),
        HeadlinePairCard((c, d)),
        HeadlinePairCard((e, f)),
    ]


def _category_group(pools: _Pools) -> GroupCard | None:
    if not pools.articles:
        return None
    category = pools.articles[0].category
    if category is None:
        return None

    items = [item for item in pools.articles if item.category == category][:GROUP_SIZE]
    pools.articles[:] = [a for a in pools.articles if not any(a is i for i in items)]
    return GroupCard(items=tuple(items), title=category, axis=Axis.VERTICAL, display_brand=False)


def compose_cards(
    ranked: Sequence[ScoredItem],
    deals_publisher_id: str | None = None,
) -> tuple[Card, ...]:
    """Build the card sequence for one load cycle from a ranked item list.

    *ranked* must already be sorted; it is not modified.
    """
    pools = _partition(ranked, deals_publisher_id or settings.deals_publisher_id)
    cards: list[Card] = []

    if pools.sponsors:
        cards.append(SponsorCard(pools.sponsors.pop(0)))
    if pools.articles:
        cards.append(HeadlineCard(pools.articles.pop(0)))
    deals = _deals_group(pools)
    if deals is not None:
        cards.append(deals)

    cards.extend(_latest_block(pools))

    category = _category_group(pools)
    if category is not None:
        cards.append(category)

    if pools.sponsors:
        cards.append(SponsorCard(pools.sponsors.pop(0)))
    deals = _deals_group(pools)
    if deals is not None:
        cards.append(deals)

    logger.info(
        "Composed %d cards from %d items (%d images unused)",
        len(cards),
        len(ranked),
        len(pools.media),
    )
    return tuple(cards)
