"""Resolve the pass tier a user holds right now."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.domain.gamepass.tiers import PassTier, effective_tier
from gamepass_api.models.gamepass import UserPassEntitlement


@dataclass(frozen=True)
class ResolvedEntitlement:
    """Entitlement evaluated at a specific instant."""

    purchased_tier: PassTier
    effective_tier: PassTier
    expires_at: datetime | None
    remaining_days: int

    @property
    def is_active(self) -> bool:
        return self.effective_tier is not PassTier.FREE


class EntitlementResolver:
    """Reads ``gamepass_entitlements`` fresh on every call."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    async def resolve(self, user_id: UUID, now: datetime) -> ResolvedEntitlement:
        stmt = select(UserPassEntitlement).where(UserPassEntitlement.user_id == user_id)
        result = await self._db.execute(stmt)
        record = result.scalar_one_or_none()
        if record is None:
            return ResolvedEntitlement(
                purchased_tier=PassTier.FREE,
                effective_tier=PassTier.FREE,
                expires_at=None,
                remaining_days=0,
            )

        expires_at = record.expires_at
        if expires_at is not None and expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        tier = effective_tier(record, now)
        remaining_days = 0
        if expires_at is not None and expires_at > now:
            remaining_days = math.ceil((expires_at - now).total_seconds() / 86_400)

        return ResolvedEntitlement(
            purchased_tier=PassTier(record.tier),
            effective_tier=tier,
            expires_at=expires_at,
            remaining_days=remaining_days,
        )


__all__ = ["EntitlementResolver", "ResolvedEntitlement"]
