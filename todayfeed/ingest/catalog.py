"""Content catalog ingestion.

The catalog is a JSON array of item records. Records are decoded one by one
and a malformed record is skipped rather than failing the whole catalog.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

import httpx

from todayfeed.config import settings
from todayfeed.ingest.fetch import DecodeError, fetch_json
from todayfeed.models import CatalogDecodeResult, ContentItem

logger = logging.getLogger(__name__)

PUBLISH_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_PUBLISH_TIME_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", re.ASCII)

REQUIRED_FIELDS = ("url_hash", "publisher_id", "content_type", "publish_time", "title")

# Optional record key -> ContentItem attribute.
OPTIONAL_FIELDS = {
    "category": "category",
    "url": "url",
    "description": "description",
    "img": "image_url",
    "publisher_name": "publisher_name",
    "domain": "domain",
}


def parse_publish_time(value: str) -> datetime:
    """Parse a catalog timestamp (``yyyy-MM-dd HH:mm:ss``, UTC)."""
    if not isinstance(value, str) or not _PUBLISH_TIME_RE.fullmatch(value):
        raise ValueError(f"unexpected publish_time {value!r}")
    return datetime.strptime(value, PUBLISH_TIME_FORMAT).replace(tzinfo=timezone.utc)


def decode_item(record: Any) -> ContentItem | None:
    """Convert one catalog record into a ContentItem, or None if unusable."""
    if not isinstance(record, dict):
        return None

    for key in REQUIRED_FIELDS:
        if not isinstance(record.get(key), str):
            return None

    optional: dict[str, str | None] = {}
    for key, attr in OPTIONAL_FIELDS.items():
        value = record.get(key)
        if value is not None and not isinstance(value, str):
            return None
        optional[attr] = value

    try:
        publish_time = parse_publish_time(record["publish_time"])
    except ValueError:
        return None

    return ContentItem(
        id=record["url_hash"],
        publisher_id=record["publisher_id"],
        content_type=record["content_type"],
        publish_time=publish_time,
        title=record["title"],
        **optional,
    )


def decode_catalog(payload: Any) -> CatalogDecodeResult:
    """Decode every record of the catalog, counting the ones that fail."""
    if not isinstance(payload, list):
        raise DecodeError(f"catalog payload must be an array, got {type(payload).__name__}")

    items: list[ContentItem] = []
    dropped = 0
    for index, record in enumerate(payload):
        item = decode_item(record)
        if item is None:
            dropped += 1
            logger.debug("Skipping malformed catalog record at index %d", index)
            continue
        items.append(item)

    if dropped:
        logger.warning("Dropped %d of %d catalog records", dropped, len(payload))
    return CatalogDecodeResult(items=tuple(items), dropped=dropped)


async def fetch_catalog(client: httpx.AsyncClient, url: str | None = None) -> CatalogDecodeResult:
    """Fetch the catalog and decode it record by record."""
    payload = await fetch_json(client, url or settings.feed_url)
    result = decode_catalog(payload)
    logger.info("Fetched %d catalog items", len(result.items))
    return result
