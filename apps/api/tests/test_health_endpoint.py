import pytest
from httpx import ASGITransport, AsyncClient

from gamepass_api.domain.gamepass import CurrencyKind, PassTier, RewardType
from gamepass_api.models.gamepass import GamePassRewardDefinition, GamePassSetting


@pytest.mark.asyncio
async def test_healthz_reports_ok(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        versioned = await client.get("/api/v1/healthz")
        root = await client.get("/healthz")

    assert versioned.json() == {"status": "ok"}
    assert root.status_code == 200
    assert root.json()["version"]


@pytest.mark.asyncio
async def test_readyz_degrades_without_catalog(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/readyz")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["components"]["database"]["status"] == "ready"
    assert payload["components"]["gamepass"]["status"] == "degraded"


@pytest.mark.asyncio
async def test_readyz_ready_with_catalog(app_with_db) -> None:
    app, session_factory = app_with_db
    async with session_factory() as session:
        session.add(
            GamePassRewardDefinition(
                day=1,
                tier=PassTier.FREE,
                reward_type=RewardType.CURRENCY,
                currency_kind=CurrencyKind.COINS,
                amount=100,
                name="100 Coins",
            )
        )
        await session.commit()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/readyz")

    payload = response.json()
    assert payload["status"] == "ready"
    assert payload["components"]["gamepass"]["detail"] == "1 rewards in catalog version 1"


@pytest.mark.asyncio
async def test_readyz_reports_disabled_pass(app_with_db) -> None:
    app, session_factory = app_with_db
    async with session_factory() as session:
        session.add(GamePassSetting(key="gamepass_enabled", value="0"))
        await session.commit()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/readyz")

    payload = response.json()
    assert payload["status"] == "ready"
    assert payload["components"]["gamepass"]["status"] == "disabled"
