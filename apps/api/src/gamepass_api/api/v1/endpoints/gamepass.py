"""API endpoints for the Game Pass track, status, and reward claims."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.api.dependencies.delivery import get_delivery_gateway
from gamepass_api.api.dependencies.session import require_member_session
from gamepass_api.db.session import get_session
from gamepass_api.domain.gamepass.rewards import payload_as_dict
from gamepass_api.domain.gamepass.tiers import PassTier
from gamepass_api.models.user import User
from gamepass_api.services.gamepass import (
    CharacterDeliveryGateway,
    ClaimErrorCode,
    ClaimRejection,
    ClaimRequest,
    ClaimResult,
    GamePassService,
)
from gamepass_api.services.gamepass.processor import utcnow


router = APIRouter(prefix="/gamepass", tags=["gamepass"])


_REJECTION_STATUS: Dict[ClaimErrorCode, int] = {
    ClaimErrorCode.TIER_NOT_ENTITLED: status.HTTP_403_FORBIDDEN,
    ClaimErrorCode.PASS_DISABLED: status.HTTP_403_FORBIDDEN,
    ClaimErrorCode.INVALID_DAY: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ClaimErrorCode.DAY_NOT_YET_REACHABLE: status.HTTP_400_BAD_REQUEST,
    ClaimErrorCode.SKIP_AHEAD_CONFIRMATION_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ClaimErrorCode.INSUFFICIENT_ZEN: status.HTTP_400_BAD_REQUEST,
    ClaimErrorCode.INVALID_DELIVERY_TARGET: status.HTTP_400_BAD_REQUEST,
    ClaimErrorCode.CATALOG_MISSING: status.HTTP_503_SERVICE_UNAVAILABLE,
    ClaimErrorCode.DELIVERY_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def get_clock() -> Callable[[], datetime]:
    return utcnow


class RewardDefinitionResponse(BaseModel):
    id: UUID
    day: int
    tier: PassTier
    name: str
    rarity: Optional[str]
    icon: Optional[str]
    reward: Dict[str, Any]


class TrackOverviewResponse(BaseModel):
    currentDay: int
    seasonStart: date
    seasonEndsAt: datetime
    daysRemaining: int
    zenCostPerDay: int
    catalogVersion: int
    flags: Dict[str, bool]
    rewards: List[RewardDefinitionResponse]


class ClaimedDaysResponse(BaseModel):
    free: List[int] = Field(default_factory=list)
    elite: List[int] = Field(default_factory=list)
    gold: List[int] = Field(default_factory=list)


class GamePassStatusResponse(BaseModel):
    currentDay: int
    seasonStart: date
    seasonEndsAt: datetime
    daysRemaining: int
    claimedDays: ClaimedDaysResponse
    effectiveTier: PassTier
    passExpiresAt: Optional[datetime]
    remainingDays: int
    zenBalance: int
    zenCostPerDay: int
    flags: Dict[str, bool]


class ClaimRequestPayload(BaseModel):
    day: int
    tier: PassTier
    payWithZen: bool = False
    characterId: Optional[int] = None


class ClaimedRewardResponse(BaseModel):
    id: UUID
    name: str
    rarity: Optional[str]
    icon: Optional[str]
    reward: Dict[str, Any]


class ClaimResponse(BaseModel):
    claimed: bool = True
    alreadyClaimed: bool = False
    day: int
    tier: PassTier
    zenSpent: int
    zenBalance: Optional[int] = None
    claimId: Optional[UUID] = None
    reward: Optional[ClaimedRewardResponse] = None


def _rejection_detail(rejection: ClaimRejection) -> Dict[str, Any]:
    detail: Dict[str, Any] = {"code": rejection.code.value, "message": rejection.message}
    if rejection.zen_cost is not None:
        detail["zenCost"] = rejection.zen_cost
    if rejection.days_ahead is not None:
        detail["daysAhead"] = rejection.days_ahead
    if rejection.zen_balance is not None:
        detail["zenBalance"] = rejection.zen_balance
    return detail


def _claim_response(result: ClaimResult) -> ClaimResponse:
    reward = None
    if result.reward is not None:
        reward = ClaimedRewardResponse(
            id=result.reward.reward_id,
            name=result.reward.name,
            rarity=result.reward.rarity,
            icon=result.reward.icon,
            reward=payload_as_dict(result.reward.payload),
        )
    return ClaimResponse(
        alreadyClaimed=result.already_claimed,
        day=result.day,
        tier=result.tier,
        zenSpent=result.zen_spent,
        zenBalance=result.zen_balance,
        claimId=result.claim_id,
        reward=reward,
    )


@router.get("/rewards", response_model=TrackOverviewResponse, summary="Active Game Pass track")
async def list_rewards(
    db: AsyncSession = Depends(get_session),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TrackOverviewResponse:
    overview = await GamePassService(db, clock=clock).list_rewards()
    return TrackOverviewResponse(
        currentDay=overview.current_day,
        seasonStart=overview.season_start,
        seasonEndsAt=overview.season_ends_at,
        daysRemaining=overview.days_remaining,
        zenCostPerDay=overview.zen_cost_per_day,
        catalogVersion=overview.catalog_version,
        flags=overview.flags,
        rewards=[RewardDefinitionResponse(**reward) for reward in overview.rewards],
    )


@router.get("/status", response_model=GamePassStatusResponse, summary="Caller's Game Pass progress")
async def get_status(
    member: User = Depends(require_member_session),
    db: AsyncSession = Depends(get_session),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> GamePassStatusResponse:
    snapshot = await GamePassService(db, clock=clock).get_status(member.id)
    return GamePassStatusResponse(
        currentDay=snapshot.current_day,
        seasonStart=snapshot.season_start,
        seasonEndsAt=snapshot.season_ends_at,
        daysRemaining=snapshot.days_remaining,
        claimedDays=ClaimedDaysResponse(
            **{tier.value: days for tier, days in snapshot.claimed_days.items()}
        ),
        effectiveTier=snapshot.effective_tier,
        passExpiresAt=snapshot.pass_expires_at,
        remainingDays=snapshot.remaining_days,
        zenBalance=snapshot.zen_balance,
        zenCostPerDay=snapshot.zen_cost_per_day,
        flags=snapshot.flags,
    )


@router.post("/claims", response_model=ClaimResponse, summary="Claim a Game Pass reward")
async def claim_reward(
    payload: ClaimRequestPayload,
    member: User = Depends(require_member_session),
    db: AsyncSession = Depends(get_session),
    gateway: CharacterDeliveryGateway = Depends(get_delivery_gateway),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ClaimResponse:
    service = GamePassService(db, delivery_gateway=gateway, clock=clock)
    outcome = await service.claim(
        member.id,
        ClaimRequest(
            day=payload.day,
            tier=payload.tier,
            pay_with_zen=payload.payWithZen,
            character_id=payload.characterId,
        ),
    )
    if isinstance(outcome, ClaimRejection):
        raise HTTPException(
            status_code=_REJECTION_STATUS.get(outcome.code, status.HTTP_400_BAD_REQUEST),
            detail=_rejection_detail(outcome),
        )
    return _claim_response(outcome)
