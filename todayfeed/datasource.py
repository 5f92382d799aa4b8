"""Load cycle: fetch sources and catalog, rank, compose cards.

A FeedDataSource runs at most one load cycle at a time. Each finished cycle
publishes a new immutable FeedSnapshot; readers holding the previous one are
unaffected.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Mapping

import httpx

from todayfeed.composer import compose_cards
from todayfeed.config import settings
from todayfeed.history import HistoryProvider, visited_domains
from todayfeed.ingest.catalog import fetch_catalog
from todayfeed.ingest.fetch import FeedError
from todayfeed.ingest.scorer import score_and_rank
from todayfeed.ingest.sources import fetch_sources
from todayfeed.models import Card, FeedSnapshot, LoadResult, LoadState, PublisherSource

logger = logging.getLogger(__name__)

Completion = Callable[[LoadResult], None]


class FeedDataSource:
    """Powers the news feed: owns the latest snapshot and the load cycle."""

    def __init__(
        self,
        config=settings,
        history: HistoryProvider | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.history = history if history is not None else HistoryProvider.from_config(config)
        self.state = LoadState.IDLE
        self.snapshot = FeedSnapshot()
        self._client = client
        self._inflight: asyncio.Task[LoadResult] | None = None

    @property
    def cards(self) -> tuple[Card, ...]:
        return self.snapshot.cards

    @property
    def sources(self) -> Mapping[str, PublisherSource]:
        return self.snapshot.sources

    @property
    def loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def load(self, completion: Completion | None = None) -> LoadResult:
        """Run a load cycle, or join the one already running.

        Stage failures are logged and reported through ``LoadResult.error``;
        they are never raised. *completion* is called exactly once, after the
        cycle ends, including when it is cancelled.
        """
        if not self.loading:
            self._inflight = asyncio.create_task(self._run_cycle())
        task = self._inflight

        result: LoadResult | None = None
        try:
            result = await asyncio.shield(task)
        except (asyncio.CancelledError, Exception) as exc:
            result = LoadResult(snapshot=self.snapshot, error=exc)
            raise
        finally:
            if completion is not None:
                completion(result)
        return result

    def cancel(self) -> bool:
        """Cancel the running cycle. Returns False when nothing was running."""
        if not self.loading:
            return False
        self._inflight.cancel()
        return True

    async def _run_cycle(self) -> LoadResult:
        previous_state = self.state
        try:
            if self._client is not None:
                return await self._load_with(self._client)
            async with httpx.AsyncClient(timeout=self.config.request_timeout) as client:
                return await self._load_with(client)
        except asyncio.CancelledError:
            self.state = previous_state
            logger.info("Feed load cancelled")
            raise

    async def _load_with(self, client: httpx.AsyncClient) -> LoadResult:
        self.state = LoadState.LOADING_SOURCES
        try:
            sources = await fetch_sources(client, self.config.sources_url)
        except FeedError as exc:
            logger.error("Loading publisher sources failed: %s", exc)
            return self._finish(self.snapshot, exc)

        self.state = LoadState.LOADING_CATALOG
        try:
            catalog = await fetch_catalog(client, self.config.feed_url)
        except FeedError as exc:
            logger.error("Loading feed catalog failed: %s", exc)
            return self._finish(replace(self.snapshot, sources=sources), exc)

        domains = await asyncio.to_thread(visited_domains, self.history, self.config.history_limit)
        ranked = score_and_rank(
            catalog.items,
            domains,
            penalty=self.config.visited_domain_penalty,
        )
        cards = compose_cards(ranked, self.config.deals_publisher_id)

        snapshot = FeedSnapshot(
            sources=sources,
            ranked=tuple(ranked),
            cards=cards,
            dropped=catalog.dropped,
            loaded_at=datetime.now(timezone.utc),
        )
        logger.info("Feed ready: %d cards from %d items", len(cards), len(ranked))
        return self._finish(snapshot)

    def _finish(self, snapshot: FeedSnapshot, error: FeedError | None = None) -> LoadResult:
        self.snapshot = snapshot
        self.state = LoadState.READY
        return LoadResult(snapshot=snapshot, error=error)
