"""Fetch JSON documents and classify what can go wrong doing so."""

from __future__ import annotations

from typing import Any

import httpx


class FeedError(Exception):
    """Base class for failures that end a load cycle."""


class FetchError(FeedError):
    """The transport did not deliver a usable response."""


class DecodeError(FeedError):
    """The payload does not have the expected shape."""


async def fetch_json(client: httpx.AsyncClient, url: str) -> Any:
    """GET *url* and return the parsed JSON body.

    Raises FetchError on transport errors and non-2xx responses, DecodeError
    when the body is not JSON.
    """
    try:
        resp = await client.get(url)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise FetchError(f"GET {url} failed: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise DecodeError(f"{url} did not return JSON: {exc}") from exc
