from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from gamepass_api.api.dependencies.delivery import get_delivery_gateway
from gamepass_api.api.v1.endpoints.gamepass import get_clock
from gamepass_api.domain.gamepass import CurrencyKind, PassTier, RewardType
from gamepass_api.models.gamepass import (
    GamePassClaim,
    GamePassRewardDefinition,
    UserPassEntitlement,
    ZenBalance,
)
from gamepass_api.models.user import User
from gamepass_api.services.gamepass import DeliveryReceipt


NOW = datetime(2026, 10, 5, 12, 0, tzinfo=timezone.utc)


class StubGateway:
    async def verify_character(self, user_id, character_id: int) -> bool:
        return character_id == 7

    async def deliver_item(self, character_id, item_id, quantity, *, reference, title=None) -> DeliveryReceipt:
        return DeliveryReceipt(success=False, message="Mail server offline")


def _install_overrides(app) -> None:
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    app.dependency_overrides[get_delivery_gateway] = lambda: StubGateway()


async def _seed(session_factory, *, zen: int = 0, tier: PassTier | None = None, with_catalog: bool = True):
    async with session_factory() as session:
        user = User(email=f"{uuid4().hex}@example.com")
        session.add(user)
        await session.flush()
        session.add(ZenBalance(user_id=user.id, amount=zen))
        if tier is not None:
            session.add(
                UserPassEntitlement(user_id=user.id, tier=tier, expires_at=NOW + timedelta(days=12, hours=1))
            )
        if not with_catalog:
            await session.commit()
            return user.id
        session.add_all(
            [
                GamePassRewardDefinition(
                    day=day,
                    tier=PassTier.FREE,
                    reward_type=RewardType.CURRENCY,
                    currency_kind=CurrencyKind.COINS,
                    amount=100 * day,
                    name=f"{100 * day} Coins",
                )
                for day in range(1, 31)
            ]
        )
        session.add(
            GamePassRewardDefinition(
                day=2,
                tier=PassTier.GOLD,
                reward_type=RewardType.ITEM,
                item_id=2042,
                quantity=1,
                name="Gold Chest",
                rarity="legendary",
            )
        )
        await session.commit()
        return user.id


@pytest.mark.asyncio
async def test_rewards_track_is_public(app_with_db) -> None:
    app, session_factory = app_with_db
    _install_overrides(app)
    await _seed(session_factory)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/gamepass/rewards")

    assert response.status_code == 200
    payload = response.json()
    assert payload["currentDay"] == 5
    assert payload["daysRemaining"] == 25
    assert payload["zenCostPerDay"] == 100_000
    assert payload["seasonStart"] == "2026-10-01"
    assert len(payload["rewards"]) == 31
    first = payload["rewards"][0]
    assert first["day"] == 1
    assert first["reward"] == {"type": "currency", "kind": "coins", "amount": 100}
    gold = [reward for reward in payload["rewards"] if reward["tier"] == "gold"]
    assert gold[0]["reward"] == {"type": "item", "itemId": 2042, "quantity": 1}


@pytest.mark.asyncio
async def test_status_requires_session(app_with_db) -> None:
    app, _ = app_with_db
    _install_overrides(app)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        missing = await client.get("/api/v1/gamepass/status")
        malformed = await client.get("/api/v1/gamepass/status", headers={"X-Session-User": "nope"})
        unknown = await client.get("/api/v1/gamepass/status", headers={"X-Session-User": str(uuid4())})

    assert missing.status_code == 401
    assert malformed.status_code == 400
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_status_reports_progress(app_with_db) -> None:
    app, session_factory = app_with_db
    _install_overrides(app)
    user_id = await _seed(session_factory, zen=250_000, tier=PassTier.GOLD)
    headers = {"X-Session-User": str(user_id)}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        claim = await client.post("/api/v1/gamepass/claims", json={"day": 3, "tier": "free"}, headers=headers)
        assert claim.status_code == 200
        response = await client.get("/api/v1/gamepass/status", headers=headers)

    assert response.status_code == 200
    payload = response.json()
    assert payload["currentDay"] == 5
    assert payload["claimedDays"] == {"free": [3], "elite": [], "gold": []}
    assert payload["effectiveTier"] == "gold"
    assert payload["remainingDays"] == 13
    assert payload["zenBalance"] == 250_000
    assert payload["flags"] == {"gamepassEnabled": True, "eliteEnabled": True, "goldEnabled": True}


@pytest.mark.asyncio
async def test_claim_flow_maps_outcomes(app_with_db) -> None:
    app, session_factory = app_with_db
    _install_overrides(app)
    user_id = await _seed(session_factory, zen=300_000)
    headers = {"X-Session-User": str(user_id)}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        locked = await client.post("/api/v1/gamepass/claims", json={"day": 8, "tier": "free"}, headers=headers)
        assert locked.status_code == 400
        assert locked.json()["detail"] == {
            "code": "skip_ahead_confirmation_required",
            "message": "This day is locked. Pay Zen to unlock early.",
            "zenCost": 300_000,
            "daysAhead": 3,
        }

        paid = await client.post(
            "/api/v1/gamepass/claims",
            json={"day": 8, "tier": "free", "payWithZen": True},
            headers=headers,
        )
        assert paid.status_code == 200
        body = paid.json()
        assert body["claimed"] is True
        assert body["alreadyClaimed"] is False
        assert body["zenSpent"] == 300_000
        assert body["zenBalance"] == 0
        assert body["reward"]["reward"] == {"type": "currency", "kind": "coins", "amount": 800}

        repeat = await client.post(
            "/api/v1/gamepass/claims",
            json={"day": 8, "tier": "free", "payWithZen": True},
            headers=headers,
        )
        assert repeat.status_code == 200
        assert repeat.json()["alreadyClaimed"] is True
        assert repeat.json()["zenSpent"] == 0

        too_far = await client.post(
            "/api/v1/gamepass/claims",
            json={"day": 9, "tier": "free", "payWithZen": True},
            headers=headers,
        )
        assert too_far.status_code == 400
        assert too_far.json()["detail"]["code"] == "insufficient_zen"
        assert too_far.json()["detail"]["zenBalance"] == 0

        not_entitled = await client.post("/api/v1/gamepass/claims", json={"day": 2, "tier": "gold"}, headers=headers)
        assert not_entitled.status_code == 403
        assert not_entitled.json()["detail"]["code"] == "tier_not_entitled"

        invalid_day = await client.post("/api/v1/gamepass/claims", json={"day": 31, "tier": "free"}, headers=headers)
        assert invalid_day.status_code == 422
        assert invalid_day.json()["detail"]["code"] == "invalid_day"

    async with session_factory() as session:
        total = await session.scalar(select(func.count()).select_from(GamePassClaim))
        assert total == 1


@pytest.mark.asyncio
async def test_failed_delivery_returns_bad_gateway(app_with_db) -> None:
    app, session_factory = app_with_db
    _install_overrides(app)
    user_id = await _seed(session_factory, tier=PassTier.GOLD)
    headers = {"X-Session-User": str(user_id)}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        no_target = await client.post("/api/v1/gamepass/claims", json={"day": 2, "tier": "gold"}, headers=headers)
        failed = await client.post(
            "/api/v1/gamepass/claims",
            json={"day": 2, "tier": "gold", "characterId": 7},
            headers=headers,
        )

    assert no_target.status_code == 400
    assert no_target.json()["detail"]["code"] == "invalid_delivery_target"
    assert failed.status_code == 502
    assert failed.json()["detail"]["code"] == "delivery_failed"

    async with session_factory() as session:
        total = await session.scalar(select(func.count()).select_from(GamePassClaim))
        assert total == 0


@pytest.mark.asyncio
async def test_client_cannot_choose_claimed_user(app_with_db) -> None:
    app, session_factory = app_with_db
    _install_overrides(app)
    caller = await _seed(session_factory)
    other = await _seed(session_factory, with_catalog=False)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/api/v1/gamepass/claims",
            json={"day": 1, "tier": "free", "userId": str(other)},
            headers={"X-Session-User": str(caller)},
        )

    assert response.status_code == 200
    async with session_factory() as session:
        owners = (await session.execute(select(GamePassClaim.user_id))).scalars().all()
        assert owners == [caller]
