from __future__ import annotations

from typing import Dict, Literal

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.db.session import get_session
from gamepass_api.services.gamepass.catalog import GamePassCatalog


router = APIRouter()


class ComponentStatus(BaseModel):
    status: Literal["ready", "disabled", "error", "degraded"]
    detail: str | None = Field(default=None, description="Human readable status detail")


class ReadinessPayload(BaseModel):
    status: Literal["ready", "degraded", "error"]
    components: Dict[str, ComponentStatus]


@router.get("/healthz", summary="Service health check")
async def service_health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", summary="Service readiness", response_model=ReadinessPayload)
async def service_readiness(session: AsyncSession = Depends(get_session)) -> ReadinessPayload:
    components: Dict[str, ComponentStatus] = {}

    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as error:
        logger.exception("Readiness database probe failed")
        components["database"] = ComponentStatus(status="error", detail=str(error))
        return ReadinessPayload(status="error", components=components)
    components["database"] = ComponentStatus(status="ready")

    status: Literal["ready", "degraded", "error"] = "ready"
    catalog = GamePassCatalog(session)
    config = await catalog.load_config()
    if not config.gamepass_enabled:
        components["gamepass"] = ComponentStatus(status="disabled", detail="Game Pass disabled via settings")
    else:
        definitions = await catalog.list_definitions(catalog_version=config.catalog_version)
        if definitions:
            components["gamepass"] = ComponentStatus(
                status="ready",
                detail=f"{len(definitions)} rewards in catalog version {config.catalog_version}",
            )
        else:
            components["gamepass"] = ComponentStatus(
                status="degraded",
                detail=f"Catalog version {config.catalog_version} has no rewards",
            )
            status = "degraded"

    return ReadinessPayload(status=status, components=components)
