"""Upsell recommendation endpoint."""

from __future__ import annotations

from datetime import timedelta
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status

from upsell_backend.config import Settings
from upsell_backend.services.assembler import RecommendationAssembler, enrich_recommendations
from upsell_backend.services.seasonal import SeasonalSource
from upsell_backend.services.shopify_client import ShopifyClient
from upsell_backend.utils.diagnostics import DiagnosticError
from upsell_backend.utils.logging import get_logger, log_diagnostic, log_structured

from .dependencies import (
    Clock,
    app_settings_dep,
    assembler_dep,
    clock_dep,
    seasonal_source_dep,
    shopify_client_dep,
)

router = APIRouter(prefix="/api", tags=["upsell"])


@router.get("/upsell")
async def upsell(
    customer_id: str | None = Query(default=None),
    app_settings: Settings = Depends(app_settings_dep),
    shopify: ShopifyClient = Depends(shopify_client_dep),
    seasonal_source: SeasonalSource = Depends(seasonal_source_dep),
    assembler: RecommendationAssembler = Depends(assembler_dep),
    clock: Clock = Depends(clock_dep),
) -> dict[str, object]:
    """Recommend seasonal picks plus the shopper's most recently bought products."""

    if not customer_id or not customer_id.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing customer_id")
    customer_id = customer_id.strip()
    if not customer_id.isdigit():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid customer_id")

    logger = get_logger()
    now = clock()
    month = now.astimezone(ZoneInfo(app_settings.shopify.store_timezone)).month - 1
    lookback = app_settings.shopify.lookback_days
    since = now - timedelta(days=lookback) if lookback else None

    try:
        orders = await shopify.fetch_orders(customer_id, since)
        seasonal = await seasonal_source.picks(month)
        result = assembler.assemble(orders, now, month, seasonal=seasonal)
        if app_settings.recommend.enrich_details and result.recommended:
            details = await shopify.fetch_product_details(p.product_id for p in result.recommended)
            result = enrich_recommendations(result, details)
    except DiagnosticError as diagnostic:
        log_diagnostic(logger, "upsell_failed", diagnostic, customer_id=customer_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate upsell",
        ) from diagnostic

    log_structured(
        logger,
        "upsell_generated",
        customer_id=customer_id,
        orders=len(orders),
        seasonal=len(seasonal),
        recommended=len(result.recommended),
    )
    return result.to_payload()


__all__ = ["router"]
