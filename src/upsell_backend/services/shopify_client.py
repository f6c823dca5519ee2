"""Thin async client for the parts of the Shopify Admin API the upsell flow needs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from upsell_backend.config import ShopifySettings
from upsell_backend.services.models import LineItem, Order, ProductDescriptor
from upsell_backend.utils.diagnostics import DiagnosticError
from upsell_backend.utils.logging import Logger

_PRODUCTS_BY_TAG_QUERY = """
query ProductsByTag($query: String!, $first: Int!) {
  products(first: $first, query: $query) {
    nodes {
      id
      title
      featuredImage { url }
      variants(first: 10) { nodes { id availableForSale } }
    }
  }
}
"""


class ShopifyClient:
    """Fetches orders and products from a single store.

    The underlying ``httpx.AsyncClient`` is created on first use and shared across requests. Every failure is
    re-raised as :class:`DiagnosticError`, which the routes turn into a generic 500.
    """

    def __init__(
        self,
        settings: ShopifySettings,
        logger: Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _client_instance(self) -> httpx.AsyncClient:
        if not self._settings.store or not self._settings.admin_token:
            raise DiagnosticError(
                "ShopifyNotConfigured",
                "Shopify store or admin token missing; set UPSELL_SHOPIFY_STORE and UPSELL_SHOPIFY_ADMIN_TOKEN.",
            )
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"https://{self._settings.store}/admin/api/{self._settings.api_version}",
                headers={
                    "X-Shopify-Access-Token": self._settings.admin_token,
                    "Content-Type": "application/json",
                },
                timeout=self._settings.http_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        client = await self._client_instance()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise DiagnosticError(
                "ShopifyErrorStatus",
                "Shopify Admin API rejected the request.",
                detail=f"{method} {path}",
                upstream_status=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise DiagnosticError(
                "ShopifyUnavailable",
                "Could not reach the Shopify Admin API.",
                detail=f"{method} {path}: {exc}",
            ) from exc
        except ValueError as exc:
            raise DiagnosticError(
                "ShopifyMalformedResponse",
                "Shopify Admin API returned a body that is not JSON.",
                detail=f"{method} {path}",
            ) from exc

    async def fetch_orders(self, customer_id: str, since: datetime | None = None) -> list[Order]:
        """Return the customer's orders, newest first as Shopify sends them.

        Only one page of ``order_limit`` orders is read. ``since`` bounds ``created_at`` when given.
        """

        params: dict[str, str | int] = {"status": "any", "limit": self._settings.order_limit}
        if since is not None:
            params["created_at_min"] = since.isoformat()
        path = f"/customers/{quote(customer_id, safe='')}/orders.json"
        payload = await self._request_json("GET", path, params=params)
        try:
            orders = [_parse_order(raw) for raw in _list_field(payload, "orders")]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise _malformed(path, exc) from exc
        self._logger.debug("orders_fetched", extra={"customer_id": customer_id, "count": len(orders)})
        return orders

    async def fetch_product_details(self, product_ids: Iterable[str]) -> list[ProductDescriptor]:
        """Resolve numeric product ids to title, first image and first purchasable variant.

        Non-numeric ids (catalog handles) are skipped; nothing is requested when none remain.
        """

        ids = list(dict.fromkeys(pid for pid in product_ids if pid.isdigit()))
        if not ids:
            return []
        path = "/products.json"
        payload = await self._request_json(
            "GET",
            path,
            params={"ids": ",".join(ids), "fields": "id,title,image,variants", "limit": len(ids)},
        )
        try:
            return [_parse_product(raw) for raw in _list_field(payload, "products")]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise _malformed(path, exc) from exc

    async def list_products(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Return raw product JSON, one page."""

        payload = await self._request_json(
            "GET", "/products.json", params={"limit": limit or self._settings.product_list_limit}
        )
        try:
            return list(_list_field(payload, "products"))
        except TypeError as exc:
            raise _malformed("/products.json", exc) from exc

    async def fetch_products_by_tag(self, tag: str, limit: int) -> list[ProductDescriptor]:
        """Query the GraphQL Admin API for products carrying ``tag``.

        Global ids are reduced to their numeric suffix so they compare equal to REST ids.
        """

        escaped = tag.replace("\\", "\\\\").replace("'", "\\'")
        path = "/graphql.json"
        payload = await self._request_json(
            "POST",
            path,
            json={
                "query": _PRODUCTS_BY_TAG_QUERY,
                "variables": {"query": f"tag:'{escaped}'", "first": limit},
            },
        )
        if isinstance(payload, Mapping) and payload.get("errors"):
            raise DiagnosticError(
                "ShopifyGraphQLError",
                "Shopify GraphQL query failed.",
                detail=str(payload["errors"]),
            )
        try:
            nodes = payload["data"]["products"]["nodes"]
            return [_parse_graphql_product(node) for node in nodes]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise _malformed(path, exc) from exc


def _malformed(path: str, exc: Exception) -> DiagnosticError:
    return DiagnosticError(
        "ShopifyMalformedResponse",
        "Unexpected payload shape from the Shopify Admin API.",
        detail=f"{path}: {exc!r}",
    )


def _list_field(payload: Any, key: str) -> Sequence[Any]:
    if not isinstance(payload, Mapping):
        raise TypeError(f"expected an object with '{key}'")
    value = payload.get(key) or []
    if not isinstance(value, list):
        raise TypeError(f"'{key}' is not a list")
    return value


def _parse_timestamp(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_order(raw: Mapping[str, Any]) -> Order:
    items = tuple(
        LineItem(product_id=str(item["product_id"]), title=str(item.get("title") or ""))
        for item in raw.get("line_items") or []
        if item.get("product_id") is not None
    )
    return Order(created_at=_parse_timestamp(raw["created_at"]), line_items=items)


def _parse_product(raw: Mapping[str, Any]) -> ProductDescriptor:
    image = raw.get("image") or {}
    variant_id = None
    for variant in raw.get("variants") or []:
        if variant.get("inventory_policy") == "continue" or (variant.get("inventory_quantity") or 0) > 0:
            variant_id = str(variant["id"])
            break
    return ProductDescriptor(
        product_id=str(raw["id"]),
        title=str(raw.get("title") or ""),
        image=image.get("src"),
        variant_id=variant_id,
    )


def _numeric_id(global_id: str) -> str:
    return global_id.rsplit("/", 1)[-1]


def _parse_graphql_product(node: Mapping[str, Any]) -> ProductDescriptor:
    image = node.get("featuredImage") or {}
    variants = (node.get("variants") or {}).get("nodes") or []
    variant_id = next(
        (_numeric_id(variant["id"]) for variant in variants if variant.get("availableForSale")),
        None,
    )
    return ProductDescriptor(
        product_id=_numeric_id(node["id"]),
        title=str(node.get("title") or ""),
        image=image.get("url"),
        variant_id=variant_id,
    )


__all__ = ["ShopifyClient"]
