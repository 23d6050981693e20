import pytest
from httpx import ASGITransport, AsyncClient

from gamepass_api.core.settings import settings
from gamepass_api.observability.gamepass import GamePassObservabilityStore, get_gamepass_store


def test_store_tracks_outcomes_and_grants() -> None:
    store = GamePassObservabilityStore()
    store.record_outcome("insufficient_zen")
    store.record_outcome("insufficient_zen")
    store.record_grant("currency", 300_000)
    store.record_grant("spins", 0)
    store.record_retry()

    snapshot = store.snapshot().as_dict()
    assert snapshot["outcomes"] == {"insufficient_zen": 2, "claimed": 2}
    assert snapshot["rewards"] == {"currency": 1, "spins": 1}
    assert snapshot["zen_spent_total"] == 300_000
    assert snapshot["retries"] == 1

    store.reset()
    assert store.snapshot().as_dict()["outcomes"] == {}


@pytest.mark.asyncio
async def test_snapshot_requires_internal_key(app_with_db, monkeypatch) -> None:
    app, _ = app_with_db
    monkeypatch.setattr(settings, "internal_api_key", "ops-key")
    get_gamepass_store().record_outcome("tier_not_entitled")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        denied = await client.get("/api/v1/observability/gamepass")
        allowed = await client.get("/api/v1/observability/gamepass", headers={"X-API-Key": "ops-key"})

    assert denied.status_code == 401
    assert allowed.status_code == 200
    assert allowed.json()["outcomes"] == {"tier_not_entitled": 1}


@pytest.mark.asyncio
async def test_prometheus_export(app_with_db, monkeypatch) -> None:
    app, _ = app_with_db
    monkeypatch.setattr(settings, "internal_api_key", "")
    store = get_gamepass_store()
    store.record_grant("item", 200_000)
    store.record_outcome("delivery_failed")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/observability/prometheus")

    assert response.status_code == 200
    body = response.text
    assert 'gamepass_claim_outcomes_total{outcome="claimed"} 1' in body
    assert 'gamepass_claim_outcomes_total{outcome="delivery_failed"} 1' in body
    assert 'gamepass_rewards_granted_total{reward_type="item"} 1' in body
    assert "gamepass_zen_spent_total 200000" in body
    assert "gamepass_claim_retries_total 0" in body
