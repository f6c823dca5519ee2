"""Upsell message templates."""

from __future__ import annotations

import random
from collections.abc import Sequence

from upsell_backend.services.models import ProductDescriptor

DEFAULT_TEMPLATES: tuple[str, ...] = (
    "Looks like it's that time again! Would you like to restock?",
    "We noticed you love these. Perfect timing for this season!",
    "Back by popular demand! These pair perfectly with your usual picks.",
    "Special treat alert: your favorites are trending again!",
    "Seasonal specials you might enjoy!",
    "Your favorites + our seasonal picks = perfect combo!",
)

DEFAULT_SEASONAL_SUFFIX = " Try our seasonal picks: {picks}."


class MessageSelector:
    """Chooses one template uniformly at random and appends a seasonal suffix when there are picks.

    Pass a seeded ``random.Random`` to make the choice reproducible.
    """

    def __init__(
        self,
        templates: Sequence[str] = DEFAULT_TEMPLATES,
        seasonal_suffix: str = DEFAULT_SEASONAL_SUFFIX,
        rng: random.Random | None = None,
    ) -> None:
        if not templates or not all(templates):
            raise ValueError("message templates must be a non-empty set of non-empty strings")
        self._templates = tuple(templates)
        self._suffix = seasonal_suffix
        self._rng = rng or random.Random()

    @property
    def templates(self) -> tuple[str, ...]:
        return self._templates

    def select(self, seasonal: Sequence[ProductDescriptor] = ()) -> str:
        message = self._rng.choice(self._templates)
        if seasonal:
            message += self._suffix.format(picks=", ".join(product.title for product in seasonal))
        return message


__all__ = ["DEFAULT_SEASONAL_SUFFIX", "DEFAULT_TEMPLATES", "MessageSelector"]
