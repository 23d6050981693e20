"""Pass tiers and entitlement rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol


class PassTier(str, Enum):
    """Entitlement levels, totally ordered free < elite < gold."""

    FREE = "free"
    ELITE = "elite"
    GOLD = "gold"

    @property
    def rank(self) -> int:
        return _TIER_RANKS[self]

    @classmethod
    def ordered(cls) -> list["PassTier"]:
        return sorted(cls, key=lambda tier: tier.rank)


_TIER_RANKS = {PassTier.FREE: 0, PassTier.ELITE: 1, PassTier.GOLD: 2}


class EntitlementLike(Protocol):
    tier: PassTier
    expires_at: datetime | None


@dataclass(frozen=True, slots=True)
class Entitlement:
    """Read-only view of a user's purchased pass."""

    tier: PassTier = PassTier.FREE
    expires_at: datetime | None = None


def effective_tier(entitlement: EntitlementLike | None, now: datetime) -> PassTier:
    """Tier in force at ``now``; lapsed or missing passes degrade to free."""

    if entitlement is None:
        return PassTier.FREE
    expires_at = entitlement.expires_at
    if expires_at is not None and expires_at.tzinfo is None:
        # SQLite hands back naive values; stored timestamps are UTC.
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at is not None and now > expires_at:
        return PassTier.FREE
    return PassTier(entitlement.tier)


def tier_grants(effective: PassTier, requested: PassTier) -> bool:
    """Whether holding ``effective`` unlocks rewards on the ``requested`` track."""

    return effective.rank >= requested.rank


__all__ = ["Entitlement", "EntitlementLike", "PassTier", "effective_tier", "tier_grants"]
