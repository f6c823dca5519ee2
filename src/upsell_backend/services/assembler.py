"""Builds the upsell response from order history and seasonal picks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from upsell_backend.services.messages import MessageSelector
from upsell_backend.services.models import (
    Order,
    ProductDescriptor,
    RecommendationResult,
)
from upsell_backend.services.scoring import DEFAULT_DECAY_DAYS, score_orders, top_products
from upsell_backend.services.seasonal import SeasonalCatalog


class RecommendationAssembler:
    """Scores past purchases, ranks them and blends in seasonal picks.

    The assembler does no I/O and keeps no state between calls; the HTTP layer fetches orders (and, for the tag
    source, seasonal products) first and hands them in.
    """

    def __init__(
        self,
        catalog: SeasonalCatalog,
        messages: MessageSelector,
        top_n: int = 5,
        decay_days: float = DEFAULT_DECAY_DAYS,
    ) -> None:
        self._catalog = catalog
        self._messages = messages
        self._top_n = top_n
        self._decay_days = decay_days

    def assemble(
        self,
        orders: Sequence[Order],
        now: datetime,
        month: int,
        seasonal: Sequence[ProductDescriptor] | None = None,
    ) -> RecommendationResult:
        """Return seasonal picks followed by the top historical products, deduplicated by id.

        Args:
            orders: The shopper's order history, oldest or newest first; order only matters for ties.
            now: Reference time for recency weights.
            month: Month index (0 = January) used for the catalog lookup.
            seasonal: Picks already resolved by the caller. When given the catalog is not consulted.
        """

        scores = score_orders(orders, now, self._decay_days)
        ranked_ids = top_products(scores, self._top_n)
        titles = _first_titles(orders)
        historical = [ProductDescriptor(product_id=pid, title=titles[pid]) for pid in ranked_ids]

        picks = tuple(seasonal) if seasonal is not None else self._catalog.for_month(month)
        return RecommendationResult(
            message=self._messages.select(picks),
            recommended=dedupe_products([*picks, *historical]),
        )


def dedupe_products(products: Iterable[ProductDescriptor]) -> list[ProductDescriptor]:
    """Drop repeated product ids, keeping the first occurrence."""

    seen: set[str] = set()
    unique: list[ProductDescriptor] = []
    for product in products:
        if product.product_id in seen:
            continue
        seen.add(product.product_id)
        unique.append(product)
    return unique


def enrich_recommendations(
    result: RecommendationResult, details: Iterable[ProductDescriptor]
) -> RecommendationResult:
    """Swap in fetched product details by id, keeping order and untouched entries."""

    by_id = {detail.product_id: detail for detail in details}
    return RecommendationResult(
        message=result.message,
        recommended=[by_id.get(product.product_id, product) for product in result.recommended],
    )


def _first_titles(orders: Iterable[Order]) -> dict[str, str]:
    titles: dict[str, str] = {}
    for order in orders:
        for item in order.line_items:
            titles.setdefault(item.product_id, item.title)
    return titles


__all__ = ["RecommendationAssembler", "dedupe_products", "enrich_recommendations"]
