"""Typed inputs and results of the claim engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Union
from uuid import UUID

from gamepass_api.domain.gamepass.rewards import RewardPayload
from gamepass_api.domain.gamepass.tiers import PassTier


class ClaimErrorCode(str, Enum):
    ALREADY_CLAIMED = "already_claimed"
    TIER_NOT_ENTITLED = "tier_not_entitled"
    DAY_NOT_YET_REACHABLE = "day_not_yet_reachable"
    SKIP_AHEAD_CONFIRMATION_REQUIRED = "skip_ahead_confirmation_required"
    INSUFFICIENT_ZEN = "insufficient_zen"
    CATALOG_MISSING = "catalog_missing"
    DELIVERY_FAILED = "delivery_failed"
    INVALID_DAY = "invalid_day"
    INVALID_DELIVERY_TARGET = "invalid_delivery_target"
    PASS_DISABLED = "pass_disabled"


@dataclass(frozen=True)
class ClaimRequest:
    """Client-supplied fields only; everything else is derived server-side."""

    day: int
    tier: PassTier
    pay_with_zen: bool = False
    character_id: int | None = None


@dataclass(frozen=True)
class RewardGrant:
    reward_id: UUID
    name: str
    payload: RewardPayload
    rarity: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class ClaimResult:
    """Successful (or idempotently repeated) claim."""

    day: int
    tier: PassTier
    reward: RewardGrant | None
    zen_spent: int = 0
    zen_balance: int | None = None
    already_claimed: bool = False
    claim_id: UUID | None = None

    claimed = True


@dataclass(frozen=True)
class ClaimRejection:
    code: ClaimErrorCode
    message: str
    zen_cost: int | None = None
    days_ahead: int | None = None
    zen_balance: int | None = None

    claimed = False


ClaimOutcome = Union[ClaimResult, ClaimRejection]


@dataclass(frozen=True)
class GamePassStatus:
    current_day: int
    season_start: date
    season_ends_at: datetime
    days_remaining: int
    claimed_days: dict[PassTier, list[int]]
    effective_tier: PassTier
    pass_expires_at: datetime | None
    remaining_days: int
    zen_balance: int
    zen_cost_per_day: int
    flags: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class TrackOverview:
    current_day: int
    season_start: date
    season_ends_at: datetime
    days_remaining: int
    zen_cost_per_day: int
    catalog_version: int
    flags: dict[str, bool]
    rewards: list[dict[str, Any]]


__all__ = [
    "ClaimErrorCode",
    "ClaimOutcome",
    "ClaimRejection",
    "ClaimRequest",
    "ClaimResult",
    "GamePassStatus",
    "RewardGrant",
    "TrackOverview",
]
