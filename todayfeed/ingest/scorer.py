"""Score and rank catalog items.

Lower scores rank first. The base score is the natural log of the item's age
in seconds, so fresh items land near zero and older ones drift up; items from
domains the user visited recently get a flat bonus on top.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable

from todayfeed.config import settings
from todayfeed.domains import base_domain
from todayfeed.models import ContentItem, ScoredItem

logger = logging.getLogger(__name__)


def _recency_score(item: ContentItem, now: datetime) -> float:
    """log(age in seconds); future-dated and brand new items score 0."""
    age = (now - item.publish_time).total_seconds()
    return math.log(age) if age > 0 else 0.0


def score_item(
    item: ContentItem,
    visited_domains: frozenset[str] | set[str],
    now: datetime,
    penalty: float | None = None,
) -> float:
    score = _recency_score(item, now)
    domain = base_domain(item.url)
    if domain is not None and domain in visited_domains:
        score -= settings.visited_domain_penalty if penalty is None else penalty
    return score


def score_items(
    items: Iterable[ContentItem],
    visited_domains: frozenset[str] | set[str] = frozenset(),
    now: datetime | None = None,
    penalty: float | None = None,
) -> list[ScoredItem]:
    """Score every item, keeping input order. Nothing is dropped."""
    if now is None:
        now = datetime.now(timezone.utc)
    return [ScoredItem(item=item, score=score_item(item, visited_domains, now, penalty)) for item in items]


def rank(scored: Iterable[ScoredItem]) -> list[ScoredItem]:
    """Sort ascending by score. Equal scores keep their catalog order."""
    return sorted(scored, key=lambda s: s.score)


def score_and_rank(
    items: Iterable[ContentItem],
    visited_domains: frozenset[str] | set[str] = frozenset(),
    now: datetime | None = None,
    penalty: float | None = None,
) -> list[ScoredItem]:
    """Full scoring pipeline: score, then stable sort."""
    ranked = rank(score_items(items, visited_domains, now, penalty))

    logger.info(
        "Scored and ranked %d items (top score: %.3f)",
        len(ranked),
        ranked[0].score if ranked else 0,
    )
    return ranked
