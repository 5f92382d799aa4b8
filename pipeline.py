"""todayfeed CLI -- load the news feed and inspect the composed cards."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from todayfeed.config import settings
from todayfeed.datasource import FeedDataSource
from todayfeed.history import SqliteHistory
from todayfeed.models import Card, GroupCard, HeadlinePairCard, NumberedCard


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level.")
def cli(verbose):
    """todayfeed -- ranked news feed composer.

        \b
        pipeline.py cards           # Load the feed and print its cards
        pipeline.py rank            # Show the ranked items behind the cards
        pipeline.py sources         # Show the publisher registry
        pipeline.py visit <URL>     # Record a visit in the history store
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--limit", default=0, help="Max cards to show (0 = all).")
def cards(limit):
    """Load the feed and print the composed card sequence."""
    result = _load()
    shown = result.cards[:limit] if limit else result.cards
    if not shown:
        click.echo("No cards.")
    for i, card in enumerate(shown, 1):
        click.echo(f"{i:>3}. {_describe(card)}")
        for item in _card_items(card):
            click.echo(f"       - [{item.publisher_id}] {item.title[:70]}")

    if result.snapshot.dropped:
        click.echo(f"\nSkipped {result.snapshot.dropped} malformed catalog records.")
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.option("--limit", default=20, help="Max items to show.")
def rank(limit):
    """Show the ranked items behind the cards."""
    result = _load()
    for s in result.snapshot.ranked[:limit]:
        click.echo(f"  {s.score:7.3f}  {s.item.content_type:<8} [{s.item.publisher_id:<14}] {s.item.title[:55]}")

    total = len(result.snapshot.ranked)
    if total > limit:
        click.echo(f"\n  ... and {total - limit} more. Use --limit to show more.")
    if not result.ok:
        sys.exit(1)


@cli.command()
def sources():
    """Show the publisher registry."""
    result = _load()
    for publisher_id, source in sorted(result.snapshot.sources.items()):
        state = "" if source.enabled else " (disabled)"
        click.echo(f"  {publisher_id:<24} {source.publisher_name} [{source.category or '-'}]{state}")
    if not result.ok:
        sys.exit(1)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("url")
def visit(url):
    """Record a visit to URL in the history store."""
    if not settings.history_path:
        click.echo("No history store configured. Set TODAYFEED_HISTORY_PATH.")
        sys.exit(1)
    history = SqliteHistory(settings.history_path)
    history.init_db()
    history.record_visit(url)
    click.echo(f"Recorded visit: {url}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load():
    source = FeedDataSource()
    result = asyncio.run(source.load())
    if not result.ok:
        click.echo(f"Feed load failed: {result.error}", err=True)
    return result


def _card_items(card: Card):
    if isinstance(card, (GroupCard, HeadlinePairCard, NumberedCard)):
        return card.items
    return (card.item,)


def _describe(card: Card) -> str:
    if isinstance(card, GroupCard):
        return f"{card.kind} '{card.title}' ({card.axis.value}, {len(card.items)} items)"
    if isinstance(card, NumberedCard):
        return f"{card.kind} '{card.title}' ({len(card.items)} items)"
    return card.kind


if __name__ == "__main__":
    cli()
