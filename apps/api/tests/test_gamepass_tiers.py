from datetime import datetime, timedelta, timezone

from gamepass_api.domain.gamepass import Entitlement, PassTier, effective_tier, tier_grants


NOW = datetime(2026, 10, 5, 12, 0, tzinfo=timezone.utc)


def test_missing_entitlement_is_free() -> None:
    assert effective_tier(None, NOW) is PassTier.FREE


def test_active_entitlement_keeps_tier() -> None:
    entitlement = Entitlement(tier=PassTier.GOLD, expires_at=NOW + timedelta(days=3))

    assert effective_tier(entitlement, NOW) is PassTier.GOLD


def test_lapsed_entitlement_degrades_to_free() -> None:
    entitlement = Entitlement(tier=PassTier.ELITE, expires_at=NOW - timedelta(seconds=1))

    assert effective_tier(entitlement, NOW) is PassTier.FREE


def test_entitlement_without_expiry_never_lapses() -> None:
    entitlement = Entitlement(tier=PassTier.ELITE, expires_at=None)

    assert effective_tier(entitlement, NOW) is PassTier.ELITE


def test_naive_expiry_is_treated_as_utc() -> None:
    entitlement = Entitlement(tier=PassTier.GOLD, expires_at=datetime(2026, 10, 5, 11, 0))

    assert effective_tier(entitlement, NOW) is PassTier.FREE


def test_tier_ordering_grants_lower_tracks() -> None:
    assert tier_grants(PassTier.GOLD, PassTier.ELITE)
    assert tier_grants(PassTier.GOLD, PassTier.FREE)
    assert tier_grants(PassTier.ELITE, PassTier.ELITE)
    assert not tier_grants(PassTier.ELITE, PassTier.GOLD)
    assert not tier_grants(PassTier.FREE, PassTier.ELITE)
    assert PassTier.ordered() == [PassTier.FREE, PassTier.ELITE, PassTier.GOLD]
