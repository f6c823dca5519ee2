"""Domain models shared by the recommendation core and the Shopify client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class LineItem:
    """One purchased product within an order. ``title`` is display only."""

    product_id: str
    title: str


@dataclass(frozen=True, slots=True)
class Order:
    """A past order as read from the Admin API."""

    created_at: datetime
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ProductDescriptor:
    """A product as it appears in the ``recommended`` list."""

    product_id: str
    title: str
    image: str | None = None
    variant_id: str | None = None

    def to_payload(self) -> dict[str, str | None]:
        return {
            "id": self.product_id,
            "title": self.title,
            "image": self.image,
            "variant_id": self.variant_id,
        }


@dataclass(slots=True)
class RecommendationResult:
    """What the upsell endpoint returns: a message plus seasonal-then-historical products."""

    message: str
    recommended: list[ProductDescriptor] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        return {
            "message": self.message,
            "recommended": [product.to_payload() for product in self.recommended],
        }


ProductScore = dict[str, float]


__all__ = [
    "LineItem",
    "Order",
    "ProductDescriptor",
    "ProductScore",
    "RecommendationResult",
]
