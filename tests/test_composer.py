"""Tests for todayfeed.composer."""

from datetime import datetime, timezone

from todayfeed.composer import compose_cards
from todayfeed.models import (
    Axis,
    ContentItem,
    GroupCard,
    HeadlineCard,
    HeadlinePairCard,
    ScoredItem,
    SponsorCard,
)

PUBLISHED = datetime(2020, 10, 5, tzinfo=timezone.utc)


def _item(id: str, content_type: str = "article", publisher_id: str = "pub", category: str | None = None) -> ContentItem:
    return ContentItem(
        id=id,
        publisher_id=publisher_id,
        content_type=content_type,
        publish_time=PUBLISHED,
        title=f"Item {id}",
        category=category,
    )


def _ranked(items: list[ContentItem]) -> list[ScoredItem]:
    return [ScoredItem(item=item, score=float(i)) for i, item in enumerate(items)]


def _ids(card) -> list[str]:
    if isinstance(card, (GroupCard, HeadlinePairCard)):
        return [i.id for i in card.items]
    return [card.item.id]


def _full_catalog() -> list[ContentItem]:
    tech = {7, 10, 15, 18}
    products = [_item(f"p{i}", content_type="product") for i in range(5)]
    articles = [
        _item(f"a{i}", category="tech" if i in tech else "world") for i in range(20)
    ]
    deals = [_item(f"d{i}", content_type="deal", publisher_id="brave_offers") for i in range(4)]
    return products + articles + deals


def test_full_layout():
    cards = compose_cards(_ranked(_full_catalog()))

    assert [c.kind for c in cards] == [
        "sponsor",
        "headline",
        "group",
        "headline",
        "headline",
        "headlinePair",
        "headlinePair",
        "group",
        "sponsor",
        "group",
    ]
    assert [_ids(c) for c in cards] == [
        ["p0"],
        ["a0"],
        ["d0", "d1", "d2"],
        ["a1"],
        ["a2"],
        ["a3", "a4"],
        ["a5", "a6"],
        ["a7", "a10", "a15"],
        ["p1"],
        ["d3"],
    ]


def test_group_card_attributes():
    cards = compose_cards(_ranked(_full_catalog()))
    deals, category, last_deals = cards[2], cards[7], cards[9]

    assert deals.title == "Deals"
    assert deals.axis is Axis.HORIZONTAL
    assert deals.display_brand is False
    assert category.title == "tech"
    assert category.axis is Axis.VERTICAL
    assert category.display_brand is False
    assert last_deals.title == "Deals"


def test_empty_pool_yields_no_cards():
    assert compose_cards([]) == ()


def test_fewer_than_six_articles_skips_latest_block():
    items = [_item("p0", content_type="product")] + [_item(f"a{i}") for i in range(6)]
    cards = compose_cards(_ranked(items))
    # One article goes to the lead headline, leaving 5: the block is skipped
    # and, without categories, so is the category group.
    assert [c.kind for c in cards] == ["sponsor", "headline"]


def test_leftover_articles_still_feed_category_group():
    items = [_item(f"a{i}", category="tech") for i in range(4)]
    cards = compose_cards(_ranked(items))

    assert [c.kind for c in cards] == ["headline", "group"]
    assert _ids(cards[1]) == ["a1", "a2", "a3"]


def test_category_group_omitted_when_front_has_no_category():
    items = [_item(f"a{i}", category=None if i == 7 else "tech") for i in range(12)]
    cards = compose_cards(_ranked(items))
    assert [c.kind for c in cards] == ["headline", "headline", "headline", "headlinePair", "headlinePair"]


def test_category_group_can_be_smaller_than_three():
    items = [_item(f"a{i}", category="tech" if i == 7 else "world") for i in range(8)]
    cards = compose_cards(_ranked(items))
    assert isinstance(cards[-1], GroupCard)
    assert _ids(cards[-1]) == ["a7"]


def test_second_sponsor_skipped_when_none_left():
    items = [_item("p0", content_type="product")] + [_item(f"a{i}") for i in range(7)]
    cards = compose_cards(_ranked(items))
    assert sum(isinstance(c, SponsorCard) for c in cards) == 1


def test_no_deals_means_no_deals_cards():
    items = [_item("p0", content_type="product"), _item("p1", content_type="product")]
    cards = compose_cards(_ranked(items))
    assert cards == (SponsorCard(items[0]), SponsorCard(items[1]))


def test_deals_split_across_both_slots():
    deals = [_item(f"d{i}", content_type="deal", publisher_id="brave_offers") for i in range(5)]
    cards = compose_cards(_ranked(deals))
    assert [_ids(c) for c in cards] == [["d0", "d1", "d2"], ["d3", "d4"]]


def test_deal_products_also_fill_sponsor_slots():
    offer = _item("offer", content_type="product", publisher_id="brave_offers")
    cards = compose_cards(_ranked([offer]))
    assert cards == (
        SponsorCard(offer),
        GroupCard(items=(offer,), title="Deals", axis=Axis.HORIZONTAL, display_brand=False),
    )


def test_custom_deals_publisher():
    items = [_item("x", content_type="deal", publisher_id="shop")]
    assert compose_cards(_ranked(items)) == ()
    cards = compose_cards(_ranked(items), deals_publisher_id="shop")
    assert _ids(cards[0]) == ["x"]


def test_images_are_not_placed():
    items = [_item(f"i{i}", content_type="image") for i in range(5)]
    assert compose_cards(_ranked(items)) == ()


def test_compose_is_idempotent_and_does_not_mutate_input():
    ranked = _ranked(_full_catalog())
    snapshot = list(ranked)

    first = compose_cards(ranked)
    second = compose_cards(ranked)

    assert first == second
    assert ranked == snapshot


def test_headline_cards_wrap_articles():
    cards = compose_cards(_ranked(_full_catalog()))
    for card in cards:
        if isinstance(card, HeadlineCard):
            assert card.item.content_type == "article"
        if isinstance(card, SponsorCard):
            assert card.item.content_type == "product"


def test_empty_category_still_forms_a_group():
    items = [_item(f"a{i}", category="") for i in range(3)]
    cards = compose_cards(_ranked(items))
    assert [c.kind for c in cards] == ["headline", "group"]
    assert cards[1].title == ""
    assert _ids(cards[1]) == ["a1", "a2"]
