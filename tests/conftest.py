"""
Shared pytest fixtures for the upsell backend test suite.

Provides:
  - ``now``: a fixed, timezone-aware reference time (15 Oct 2025, month index 9).
  - ``make_order``: factory building an ``Order`` a given number of days before ``now``.
  - ``shopify_settings`` / ``app_settings``: settings pointing at a fake store.
  - ``shopify_mock``: an ``httpx.MockTransport`` routing table plus the requests it saw.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from upsell_backend.config import ApiSettings, RecommendationSettings, Settings, ShopifySettings
from upsell_backend.services.models import LineItem, Order
from upsell_backend.services.shopify_client import ShopifyClient

NOW = datetime(2025, 10, 15, 12, 0, 0, tzinfo=timezone.utc)
STORE = "candy-test.myshopify.com"
API_ROOT = f"https://{STORE}/admin/api/2025-10"


# ── Time and orders ───────────────────────────────────────────────────────────

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_order() -> Callable[..., Order]:
    """Return ``make_order(days_ago, *product_ids)``; titles are ``Title <id>``."""

    def _make(days_ago: float, *product_ids: str) -> Order:
        return Order(
            created_at=NOW - timedelta(days=days_ago),
            line_items=tuple(LineItem(product_id=pid, title=f"Title {pid}") for pid in product_ids),
        )

    return _make


# ── Settings ──────────────────────────────────────────────────────────────────

@pytest.fixture
def shopify_settings() -> ShopifySettings:
    return ShopifySettings(store=STORE, admin_token="shpat_test", lookback_days=365)


@pytest.fixture
def app_settings(shopify_settings: ShopifySettings) -> Settings:
    return Settings(
        shopify=shopify_settings,
        recommend=RecommendationSettings(enrich_details=False),
        api=ApiSettings(enable_cors=False),
    )


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("upsell.tests")


# ── Shopify transport ─────────────────────────────────────────────────────────

class ShopifyMock:
    """Routes ``(method, path)`` to canned responses and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], httpx.Response | Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, json: Any = None, status_code: int = 200) -> None:
        self.routes[(method, f"/admin/api/2025-10{path}")] = httpx.Response(status_code, json=json)

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, f"/admin/api/2025-10{path}")] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errors": "Not Found"})
        if callable(route):
            return route(request)
        return route

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def shopify_mock() -> ShopifyMock:
    return ShopifyMock()


@pytest.fixture
def shopify_client(
    shopify_settings: ShopifySettings, shopify_mock: ShopifyMock, logger: logging.Logger
) -> ShopifyClient:
    return ShopifyClient(shopify_settings, logger, transport=shopify_mock.transport())


def order_payload(created_at: str, *items: tuple[int | None, str]) -> dict[str, Any]:
    """Shape of one order as returned by ``customers/{id}/orders.json``."""

    return {
        "id": 450789469,
        "created_at": created_at,
        "line_items": [{"product_id": pid, "title": title, "quantity": 1} for pid, title in items],
    }
