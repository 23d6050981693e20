from fastapi import APIRouter

from .endpoints import gamepass, health, observability

router = APIRouter()
router.include_router(health.router, tags=["Health"])
router.include_router(gamepass.router)
router.include_router(observability.router)
