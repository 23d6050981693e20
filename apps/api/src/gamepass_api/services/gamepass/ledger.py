"""Claim ledger: the per-user record of redeemed days."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.domain.gamepass.season import Season
from gamepass_api.domain.gamepass.tiers import PassTier
from gamepass_api.models.gamepass import GamePassClaim


class DuplicateClaimError(RuntimeError):
    """Raised when the storage unique constraint rejects a second claim."""

    def __init__(self, user_id: UUID, day: int, tier: PassTier) -> None:
        super().__init__(f"Day {day} on the {tier.value} track is already claimed")
        self.user_id = user_id
        self.day = day
        self.tier = tier


class ClaimLedger:
    """Reads and appends ``gamepass_claims`` rows scoped to one season."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    async def has_claimed(self, user_id: UUID, season: Season, day: int, tier: PassTier) -> bool:
        stmt = select(GamePassClaim.id).where(
            GamePassClaim.user_id == user_id,
            GamePassClaim.season_start == season.key,
            GamePassClaim.day == day,
            GamePassClaim.tier == tier,
        )
        result = await self._db.execute(stmt)
        return result.first() is not None

    async def claimed_days(self, user_id: UUID, season: Season) -> dict[PassTier, list[int]]:
        """Claimed days per track, ascending and de-duplicated."""

        stmt = select(GamePassClaim.day, GamePassClaim.tier).where(
            GamePassClaim.user_id == user_id,
            GamePassClaim.season_start == season.key,
        )
        result = await self._db.execute(stmt)
        days: dict[PassTier, set[int]] = {tier: set() for tier in PassTier.ordered()}
        for day, tier in result.all():
            days[PassTier(tier)].add(int(day))
        return {tier: sorted(values) for tier, values in days.items()}

    async def record(
        self,
        user_id: UUID,
        season: Season,
        day: int,
        tier: PassTier,
        *,
        zen_spent: int,
        claimed_at: datetime,
        character_id: int | None = None,
        reward_id: UUID | None = None,
        reward_snapshot: dict[str, Any] | None = None,
    ) -> GamePassClaim:
        """Insert a claim inside the caller's transaction.

        The row is flushed immediately so the unique constraint on
        ``(user_id, season_start, day, tier)`` fires here rather than at
        commit. Any integrity failure rolls the whole transaction back. It is
        reported as :class:`DuplicateClaimError` only when the claim row is
        then visible; other violations (a reward or user removed mid-claim)
        re-raise the original :class:`IntegrityError`. Nothing is ever
        overwritten.
        """

        if zen_spent < 0:
            raise ValueError("zen_spent must be non-negative")

        claim = GamePassClaim(
            user_id=user_id,
            season_start=season.key,
            day=day,
            tier=tier,
            zen_spent=zen_spent,
            character_id=character_id,
            reward_id=reward_id,
            reward_snapshot=reward_snapshot,
            claimed_at=claimed_at,
        )
        self._db.add(claim)
        try:
            await self._db.flush()
        except IntegrityError as error:
            await self._db.rollback()
            if not await self.has_claimed(user_id, season, day, tier):
                logger.error(
                    "Claim insert failed without a prior claim",
                    user_id=str(user_id),
                    day=day,
                    tier=tier.value,
                    reward_id=str(reward_id) if reward_id else None,
                )
                raise
            logger.warning(
                "Claim rejected by ledger constraint",
                user_id=str(user_id),
                day=day,
                tier=tier.value,
            )
            raise DuplicateClaimError(user_id, day, tier) from error
        return claim


__all__ = ["ClaimLedger", "DuplicateClaimError"]
