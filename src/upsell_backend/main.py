"""FastAPI application factory for the upsell backend."""

from __future__ import annotations

import random

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from upsell_backend.api import products, upsell
from upsell_backend.api.dependencies import lifespan_dependencies, settings
from upsell_backend.config import Settings
from upsell_backend.services.seasonal import DEFAULT_SEASONAL_CATALOG, SeasonalCatalog
from upsell_backend.utils.logging import get_logger


def create_app(
    app_settings: Settings | None = None,
    seasonal_catalog: SeasonalCatalog = DEFAULT_SEASONAL_CATALOG,
    rng: random.Random | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``seasonal_catalog`` and ``rng`` are injected so tests and other storefronts can swap them without touching
    module state.
    """

    app_settings = app_settings or settings()
    logger = get_logger(app_settings.api.log_level)
    logger.info(
        "starting upsell backend",
        extra={"port": app_settings.api.port, "store": app_settings.shopify.store or None},
    )

    async def lifespan(app: FastAPI):
        async with lifespan_dependencies(app_settings, seasonal_catalog, rng) as state:
            app.state.upsell_state = state
            yield
            del app.state.upsell_state

    app = FastAPI(title="Upsell Backend", lifespan=lifespan)

    if app_settings.api.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.api.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(upsell.router)
    app.include_router(products.router)

    @app.get("/healthz")
    async def readiness() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the module-level app with uvicorn using the configured host and port."""

    api = settings().api
    uvicorn.run("upsell_backend.main:app", host=api.host, port=api.port)


__all__ = ["create_app", "app", "run"]
