"""Runtime configuration models for the upsell backend."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_SEASONAL_TAGS = {
    0: "winter",
    1: "valentines",
    2: "spring",
    3: "easter",
    4: "mothers-day",
    5: "summer",
    6: "independence-day",
    7: "back-to-school",
    8: "autumn",
    9: "halloween",
    10: "thanksgiving",
    11: "holiday",
}


class ShopifySettings(BaseSettings):
    """How we reach the store's Admin API."""

    store: str = Field(
        default="",
        description="Shop domain, e.g. ``example.myshopify.com``. Requests fail with a diagnostic while unset.",
    )
    admin_token: str = Field(
        default="",
        repr=False,
        description="Admin API access token sent as ``X-Shopify-Access-Token``.",
    )
    api_version: str = Field(default="2025-10", description="Admin API version segment used in every URL.")
    http_timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="Timeout for every Admin API call. The recommendation core never blocks, so this is the only one.",
    )
    order_limit: int = Field(
        default=250,
        ge=1,
        le=250,
        description="Orders fetched per shopper. One page only; 250 is the Admin API maximum.",
    )
    lookback_days: int | None = Field(
        default=365,
        ge=1,
        description="Only orders created within this many days are fetched. Unset for an unbounded history.",
    )
    product_list_limit: int = Field(default=10, ge=1, le=250, description="Page size for the products proxy.")
    store_timezone: str = Field(
        default="UTC",
        description="IANA zone of the store. Seasonal picks follow the calendar month in this zone, not in UTC.",
    )

    @field_validator("store_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    model_config = SettingsConfigDict(env_prefix="UPSELL_SHOPIFY_")


class RecommendationSettings(BaseSettings):
    """Knobs for scoring, ranking and seasonal blending."""

    top_n: int = Field(default=5, ge=1, le=50, description="Historical products kept after ranking.")
    decay_days: float = Field(
        default=30.0,
        gt=0,
        description="Age in days at which a purchase counts half as much as one made today.",
    )
    seasonal_source: Literal["static", "tag", "none"] = Field(
        default="static",
        description=(
            "Where seasonal picks come from: the built-in month table, a live catalog query by tag, or nowhere."
        ),
    )
    seasonal_tags: dict[int, str] = Field(
        default_factory=lambda: dict(_DEFAULT_SEASONAL_TAGS),
        description="Month index (0 = January) to product tag, used when ``seasonal_source`` is ``tag``.",
    )
    seasonal_tag_limit: int = Field(default=2, ge=1, le=20, description="Products taken per seasonal tag.")
    enrich_details: bool = Field(
        default=True,
        description="Resolve recommended ids to current titles, images and purchasable variants before responding.",
    )

    model_config = SettingsConfigDict(env_prefix="UPSELL_RECOMMEND_")


class ApiSettings(BaseSettings):
    """API-level configuration for the FastAPI application."""

    host: str = Field(default="0.0.0.0", description="Address uvicorn should bind to.")
    port: int = Field(default=10000, ge=1, le=65535, description="Port exposed for HTTP traffic.")
    enable_cors: bool = Field(default=True, description="Whether storefront scripts may call the API cross-origin.")
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Whitelisted origins if CORS is enabled.",
    )
    log_level: str = Field(default="INFO", description="Level for the application logger.")

    model_config = SettingsConfigDict(env_prefix="UPSELL_API_")


class Settings(BaseSettings):
    """Top-level settings container that aggregates subsystem configuration."""

    shopify: ShopifySettings = Field(default_factory=ShopifySettings)
    recommend: RecommendationSettings = Field(default_factory=RecommendationSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    model_config = SettingsConfigDict(env_prefix="UPSELL_", env_nested_delimiter="__")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance.

    Tests that tweak the environment must call ``get_settings.cache_clear()``.
    """

    return Settings()


__all__ = ["Settings", "get_settings", "ShopifySettings", "RecommendationSettings", "ApiSettings"]
