"""Shared FastAPI dependency providers and application lifespan management."""

from __future__ import annotations

import random
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Depends, Request

from upsell_backend.config import Settings, get_settings
from upsell_backend.services.assembler import RecommendationAssembler
from upsell_backend.services.messages import MessageSelector
from upsell_backend.services.seasonal import SeasonalCatalog, SeasonalSource, build_seasonal_source
from upsell_backend.services.shopify_client import ShopifyClient
from upsell_backend.utils.logging import get_logger

Clock = Callable[[], datetime]


@dataclass(slots=True)
class AppState:
    """Holds singletons that should be reused across requests."""

    settings: Settings
    shopify: ShopifyClient
    seasonal_source: SeasonalSource
    assembler: RecommendationAssembler


def settings() -> Settings:
    """Expose the cached settings instance for dependency injection."""

    return get_settings()


@asynccontextmanager
async def lifespan_dependencies(
    app_settings: Settings,
    catalog: SeasonalCatalog,
    rng: random.Random | None = None,
) -> AsyncIterator[AppState]:
    """Build the Shopify client and recommendation core once and close the client at shutdown."""

    logger = get_logger()
    shopify = ShopifyClient(settings=app_settings.shopify, logger=logger)
    assembler = RecommendationAssembler(
        catalog=catalog,
        messages=MessageSelector(rng=rng),
        top_n=app_settings.recommend.top_n,
        decay_days=app_settings.recommend.decay_days,
    )
    seasonal_source = build_seasonal_source(app_settings.recommend, catalog, shopify, logger)

    try:
        yield AppState(
            settings=app_settings,
            shopify=shopify,
            seasonal_source=seasonal_source,
            assembler=assembler,
        )
    finally:
        await shopify.aclose()


def app_state(request: Request) -> AppState:
    """Fetch the :class:`AppState` installed by the lifespan."""

    state = getattr(request.app.state, "upsell_state", None)
    assert isinstance(state, AppState), "App state missing; ensure lifespan wiring executed."
    return state


def app_settings_dep(state: AppState = Depends(app_state)) -> Settings:
    return state.settings


def shopify_client_dep(state: AppState = Depends(app_state)) -> ShopifyClient:
    return state.shopify


def seasonal_source_dep(state: AppState = Depends(app_state)) -> SeasonalSource:
    return state.seasonal_source


def assembler_dep(state: AppState = Depends(app_state)) -> RecommendationAssembler:
    return state.assembler


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clock_dep() -> Clock:
    """Return the wall clock in UTC; tests override this to pin ``now``.

    Routes convert to the store timezone before deriving the calendar month.
    """

    return _utcnow


__all__ = [
    "AppState",
    "Clock",
    "settings",
    "lifespan_dependencies",
    "app_settings_dep",
    "shopify_client_dep",
    "seasonal_source_dep",
    "assembler_dep",
    "clock_dep",
]
