"""
Tests for upsell_backend/services/seasonal.py.

What we test
------------
SeasonalCatalog:
  - Lookup by month index; unknown months give an empty tuple.
  - Rejects month indexes outside 0..11; input mapping changes do not leak in.
  - The default catalog covers all twelve months.
Sources:
  - Static source serves the catalog, the "none" source serves nothing.
  - Tag source queries the live catalog with the month's tag; months without a tag make no request.
  - build_seasonal_source() honours the configured source.
"""

from __future__ import annotations

import asyncio

import pytest

from upsell_backend.config import RecommendationSettings
from upsell_backend.services.models import ProductDescriptor
from upsell_backend.services.seasonal import (
    DEFAULT_SEASONAL_CATALOG,
    NoSeasonalSource,
    SeasonalCatalog,
    StaticSeasonalSource,
    TagSeasonalSource,
    build_seasonal_source,
)

S1 = ProductDescriptor(product_id="S1", title="Seasonal One")
S2 = ProductDescriptor(product_id="S2", title="Seasonal Two")


# ── SeasonalCatalog ───────────────────────────────────────────────────────────

def test_catalog_lookup_by_month() -> None:
    catalog = SeasonalCatalog({3: [S1, S2]})
    assert catalog.for_month(3) == (S1, S2)


def test_catalog_missing_month_is_empty() -> None:
    assert SeasonalCatalog({3: [S1]}).for_month(4) == ()


@pytest.mark.parametrize("month", [-1, 12])
def test_catalog_rejects_invalid_months(month: int) -> None:
    with pytest.raises(ValueError):
        SeasonalCatalog({month: [S1]})


def test_catalog_is_isolated_from_its_input() -> None:
    entries = {0: [S1]}
    catalog = SeasonalCatalog(entries)
    entries[0].append(S2)
    entries[1] = [S2]

    assert catalog.for_month(0) == (S1,)
    assert catalog.for_month(1) == ()


def test_default_catalog_covers_every_month() -> None:
    assert DEFAULT_SEASONAL_CATALOG.months() == tuple(range(12))
    assert [p.title for p in DEFAULT_SEASONAL_CATALOG.for_month(11)] == ["Gingerbread Fudge", "Peppermint Bark"]


# ── Sources ───────────────────────────────────────────────────────────────────

def test_static_source_serves_catalog() -> None:
    source = StaticSeasonalSource(SeasonalCatalog({9: [S1]}))
    assert asyncio.run(source.picks(9)) == (S1,)
    assert asyncio.run(source.picks(10)) == ()


def test_none_source_serves_nothing() -> None:
    assert asyncio.run(NoSeasonalSource().picks(0)) == ()


def test_tag_source_queries_month_tag(shopify_client, shopify_mock, logger) -> None:
    shopify_mock.add(
        "POST",
        "/graphql.json",
        json={
            "data": {
                "products": {
                    "nodes": [
                        {
                            "id": "gid://shopify/Product/111",
                            "title": "Candy Corn",
                            "featuredImage": {"url": "https://cdn.example/corn.png"},
                            "variants": {"nodes": [{"id": "gid://shopify/ProductVariant/9", "availableForSale": True}]},
                        }
                    ]
                }
            }
        },
    )
    source = TagSeasonalSource(shopify_client, {9: "halloween"}, limit=2, logger=logger)

    picks = asyncio.run(source.picks(9))

    assert picks == (
        ProductDescriptor(product_id="111", title="Candy Corn", image="https://cdn.example/corn.png", variant_id="9"),
    )
    body = shopify_mock.requests[0].content.decode()
    assert "tag:'halloween'" in body


def test_tag_source_without_tag_makes_no_request(shopify_client, shopify_mock, logger) -> None:
    source = TagSeasonalSource(shopify_client, {9: "halloween"}, limit=2, logger=logger)
    assert asyncio.run(source.picks(2)) == ()
    assert shopify_mock.requests == []


@pytest.mark.parametrize(
    ("configured", "expected"),
    [("static", StaticSeasonalSource), ("tag", TagSeasonalSource), ("none", NoSeasonalSource)],
)
def test_build_seasonal_source(configured, expected, shopify_client, logger) -> None:
    settings = RecommendationSettings(seasonal_source=configured)
    source = build_seasonal_source(settings, DEFAULT_SEASONAL_CATALOG, shopify_client, logger)
    assert isinstance(source, expected)
