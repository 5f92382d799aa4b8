"""Publisher registry -- maps publisher ids to their metadata."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from todayfeed.config import settings
from todayfeed.ingest.fetch import DecodeError, fetch_json
from todayfeed.models import PublisherSource

logger = logging.getLogger(__name__)


def _optional_str(record: dict, key: str, publisher_id: str) -> str | None:
    value = record.get(key)
    if value is not None and not isinstance(value, str):
        raise DecodeError(f"source {publisher_id!r}: {key} must be a string")
    return value


def decode_sources(payload: Any) -> dict[str, PublisherSource]:
    """Decode the registry payload. Any malformed entry rejects the whole registry."""
    if not isinstance(payload, dict):
        raise DecodeError(f"sources payload must be an object, got {type(payload).__name__}")

    sources: dict[str, PublisherSource] = {}
    for publisher_id, record in payload.items():
        if not isinstance(record, dict):
            raise DecodeError(f"source {publisher_id!r} is not an object")

        name = record.get("publisher_name")
        if not isinstance(name, str):
            raise DecodeError(f"source {publisher_id!r} has no publisher_name")

        enabled = record.get("enabled", True)
        if not isinstance(enabled, bool):
            raise DecodeError(f"source {publisher_id!r}: enabled must be a boolean")

        sources[publisher_id] = PublisherSource(
            publisher_id=publisher_id,
            publisher_name=name,
            category=_optional_str(record, "category", publisher_id),
            enabled=enabled,
        )
    return sources


async def fetch_sources(client: httpx.AsyncClient, url: str | None = None) -> dict[str, PublisherSource]:
    """Fetch and decode the publisher registry."""
    payload = await fetch_json(client, url or settings.sources_url)
    sources = decode_sources(payload)
    logger.info("Fetched %d publisher sources", len(sources))
    return sources
