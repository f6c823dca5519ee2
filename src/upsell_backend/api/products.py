"""Product listing proxy."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from upsell_backend.services.shopify_client import ShopifyClient
from upsell_backend.utils.diagnostics import DiagnosticError
from upsell_backend.utils.logging import get_logger, log_diagnostic

from .dependencies import shopify_client_dep

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def list_products(shopify: ShopifyClient = Depends(shopify_client_dep)) -> list[dict[str, Any]]:
    """Return one page of the store's products as Shopify sends them."""

    try:
        return await shopify.list_products()
    except DiagnosticError as diagnostic:
        log_diagnostic(get_logger(), "products_fetch_failed", diagnostic)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch products",
        ) from diagnostic


__all__ = ["router"]
