"""Browsing history lookups used to personalize ranking."""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable

from todayfeed.config import settings
from todayfeed.domains import base_domain

logger = logging.getLogger(__name__)


class HistoryProvider(ABC):
    @abstractmethod
    def recent_urls(self, limit: int) -> list[str]: ...

    @classmethod
    def from_config(cls, config) -> "HistoryProvider":
        if config.history_path:
            return SqliteHistory(config.history_path)
        return StaticHistory()


class StaticHistory(HistoryProvider):
    """In-memory history, newest URL last."""

    def __init__(self, urls: Iterable[str] = ()):
        self._urls = list(urls)

    def recent_urls(self, limit: int) -> list[str]:
        if limit <= 0:
            return []
        return list(reversed(self._urls[-limit:]))


class SqliteHistory(HistoryProvider):
    """History stored in a sqlite ``history(url, visited_at)`` table."""

    def __init__(self, path: str):
        self.path = path

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        conn = self.get_connection()
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT NOT NULL,
                visited_at TIMESTAMP NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_history_visited_at ON history (visited_at);
            """
        )
        conn.close()

    def record_visit(self, url: str, visited_at: datetime | None = None) -> None:
        visited_at = visited_at or datetime.now(timezone.utc)
        conn = self.get_connection()
        conn.execute(
            "INSERT INTO history (url, visited_at) VALUES (?, ?)",
            (url, visited_at.isoformat()),
        )
        conn.commit()
        conn.close()

    def recent_urls(self, limit: int) -> list[str]:
        conn = self.get_connection()
        try:
            rows = conn.execute(
                "SELECT url FROM history ORDER BY visited_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [row["url"] for row in rows]


def visited_domains(provider: HistoryProvider | None, limit: int | None = None) -> frozenset[str]:
    """Base domains among the most recent *limit* history entries.

    History is a best-effort signal: an unavailable provider yields an empty
    set instead of an error.
    """
    if provider is None:
        return frozenset()
    limit = settings.history_limit if limit is None else limit

    try:
        urls = provider.recent_urls(limit)
    except Exception as exc:
        logger.warning("History lookup failed, ranking without it: %s", exc)
        return frozenset()

    domains = frozenset(d for d in (base_domain(url) for url in urls) if d)
    logger.debug("Loaded %d visited domains from %d history entries", len(domains), len(urls))
    return domains
