"""Recency-weighted product scoring over a shopper's order history."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from upsell_backend.services.models import Order, ProductScore

DEFAULT_DECAY_DAYS = 30.0
_SECONDS_PER_DAY = 86400.0


def recency_weight(days_ago: float, decay_days: float = DEFAULT_DECAY_DAYS) -> float:
    """Weight of a purchase made ``days_ago`` days ago: 1.0 today, 0.5 after ``decay_days``.

    Negative ages (orders stamped after ``now``) count as today.
    """

    return 1.0 / (1.0 + max(days_ago, 0.0) / decay_days)


def score_orders(
    orders: Iterable[Order],
    now: datetime,
    decay_days: float = DEFAULT_DECAY_DAYS,
) -> ProductScore:
    """Sum the recency weight of every line item per product id.

    The mapping keeps first-seen order so the ranker can break ties by it.
    """

    scores: ProductScore = {}
    for order in orders:
        days_ago = (now - order.created_at).total_seconds() / _SECONDS_PER_DAY
        weight = recency_weight(days_ago, decay_days)
        for item in order.line_items:
            scores[item.product_id] = scores.get(item.product_id, 0.0) + weight
    return scores


def top_products(scores: Mapping[str, float], k: int) -> list[str]:
    """Return up to ``k`` product ids by descending score; ties keep insertion order."""

    if k <= 0:
        return []
    # sorted() is stable, including with reverse=True.
    ranked = sorted(scores.items(), key=lambda entry: entry[1], reverse=True)
    return [product_id for product_id, _ in ranked[:k]]


__all__ = ["DEFAULT_DECAY_DAYS", "recency_weight", "score_orders", "top_products"]
