"""Seasonal picks: a static month table or a live catalog query by tag."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Protocol

from upsell_backend.config import RecommendationSettings
from upsell_backend.services.models import ProductDescriptor
from upsell_backend.services.shopify_client import ShopifyClient
from upsell_backend.utils.logging import Logger


class SeasonalCatalog:
    """Read-only mapping of month index (0 = January) to seasonal products."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[int, Iterable[ProductDescriptor]]) -> None:
        for month in entries:
            if not 0 <= month <= 11:
                raise ValueError(f"month index must be within 0..11, got {month}")
        self._entries: Mapping[int, tuple[ProductDescriptor, ...]] = MappingProxyType(
            {month: tuple(products) for month, products in entries.items()}
        )

    def for_month(self, month: int) -> tuple[ProductDescriptor, ...]:
        """Return the picks configured for ``month``, or an empty tuple."""

        return self._entries.get(month, ())

    def months(self) -> tuple[int, ...]:
        return tuple(sorted(self._entries))

    def __repr__(self) -> str:
        return f"SeasonalCatalog(months={list(self.months())})"


def _picks(*pairs: tuple[str, str]) -> tuple[ProductDescriptor, ...]:
    return tuple(ProductDescriptor(product_id=handle, title=title) for handle, title in pairs)


DEFAULT_SEASONAL_CATALOG = SeasonalCatalog(
    {
        0: _picks(("winter-chocolate-mix", "Winter Chocolate Mix"), ("hot-cocoa-bombs", "Hot Cocoa Bombs")),
        1: _picks(("valentine-hearts", "Valentine Hearts"), ("strawberry-truffles", "Strawberry Truffles")),
        2: _picks(("spring-gummies", "Spring Gummies"), ("chocolate-carrots", "Chocolate Carrots")),
        3: _picks(("easter-eggs", "Easter Eggs"), ("jelly-beans", "Jelly Beans")),
        4: _picks(("mothers-day-chocolate-box", "Mother's Day Chocolate Box"), ("fruit-chews", "Fruit Chews")),
        5: _picks(("summer-gummies", "Summer Gummies"), ("ice-cream-candy", "Ice Cream Candy")),
        6: _picks(("patriotic-candies", "Patriotic Candies"), ("berry-gummies", "Berry Gummies")),
        7: _picks(("back-to-school-snacks", "Back to School Snacks"), ("fun-size-chocolates", "Fun Size Chocolates")),
        8: _picks(("autumn-fudge", "Autumn Fudge"), ("pumpkin-spice-treats", "Pumpkin Spice Treats")),
        9: _picks(("candy-corn", "Candy Corn"), ("pumpkin-spice-chocolate", "Pumpkin Spice Chocolate")),
        10: _picks(("halloween-treats", "Halloween Treats"), ("chocolate-skeletons", "Chocolate Skeletons")),
        11: _picks(("gingerbread-fudge", "Gingerbread Fudge"), ("peppermint-bark", "Peppermint Bark")),
    }
)


class SeasonalSource(Protocol):
    """Resolves the seasonal picks for a month before the assembler runs."""

    async def picks(self, month: int) -> Sequence[ProductDescriptor]: ...


class StaticSeasonalSource:
    """Serves picks straight from a :class:`SeasonalCatalog`."""

    def __init__(self, catalog: SeasonalCatalog) -> None:
        self._catalog = catalog

    async def picks(self, month: int) -> Sequence[ProductDescriptor]:
        return self._catalog.for_month(month)


class TagSeasonalSource:
    """Looks up live products carrying the tag configured for the month.

    Errors from the client propagate so the route reports the whole request as failed.
    """

    def __init__(
        self,
        client: ShopifyClient,
        tags: Mapping[int, str],
        limit: int,
        logger: Logger,
    ) -> None:
        self._client = client
        self._tags = dict(tags)
        self._limit = limit
        self._logger = logger

    async def picks(self, month: int) -> Sequence[ProductDescriptor]:
        tag = self._tags.get(month)
        if not tag:
            return ()
        products = await self._client.fetch_products_by_tag(tag, self._limit)
        self._logger.debug("seasonal_tag_lookup", extra={"tag": tag, "count": len(products)})
        return tuple(products)


class NoSeasonalSource:
    async def picks(self, month: int) -> Sequence[ProductDescriptor]:
        return ()


def build_seasonal_source(
    settings: RecommendationSettings,
    catalog: SeasonalCatalog,
    client: ShopifyClient,
    logger: Logger,
) -> SeasonalSource:
    """Pick the seasonal source named by ``settings.seasonal_source``."""

    if settings.seasonal_source == "tag":
        return TagSeasonalSource(client, settings.seasonal_tags, settings.seasonal_tag_limit, logger)
    if settings.seasonal_source == "none":
        return NoSeasonalSource()
    return StaticSeasonalSource(catalog)


__all__ = [
    "DEFAULT_SEASONAL_CATALOG",
    "NoSeasonalSource",
    "SeasonalCatalog",
    "SeasonalSource",
    "StaticSeasonalSource",
    "TagSeasonalSource",
    "build_seasonal_source",
]
