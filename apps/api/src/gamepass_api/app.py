from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from loguru import logger

from gamepass_api.core.settings import settings
from gamepass_api.services.gamepass.delivery import HttpCharacterDeliveryClient
from .api.routes import api_router
from .core.logging import configure_logging
from .observability.tracing import configure_tracing


APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    http_client = httpx.AsyncClient(timeout=settings.character_delivery_timeout_seconds)
    delivery = HttpCharacterDeliveryClient.from_settings(http_client=http_client)
    app.state.character_delivery = delivery

    if delivery.is_configured:
        logger.info("Character delivery bridge enabled", base_url=settings.character_delivery_base_url)
    else:
        logger.warning(
            "Character delivery bridge disabled",
            reason="character_delivery_base_url is not set; item rewards will fail",
        )

    try:
        yield
    finally:
        await http_client.aclose()
        app.state.character_delivery = None


def create_app() -> FastAPI:
    """Application factory for the Game Pass API service."""
    configure_logging(
        service_name="gamepass-api",
        environment=settings.environment,
        version=APP_VERSION,
        level=settings.log_level,
    )

    app = FastAPI(
        title="Game Pass API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    configure_tracing(
        app,
        service_name="gamepass-api",
        service_version=APP_VERSION,
        environment=settings.environment,
    )

    app.include_router(api_router)

    @app.get("/healthz", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": APP_VERSION,
        }

    return app
