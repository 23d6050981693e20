"""Read and claim surfaces for the Game Pass track."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.core.settings import settings
from gamepass_api.domain.gamepass.rewards import InvalidRewardDefinition, payload_as_dict, payload_from_definition
from gamepass_api.domain.gamepass.season import Season, current_day, current_season, days_remaining
from gamepass_api.domain.gamepass.tiers import PassTier
from gamepass_api.models.gamepass import GamePassRewardDefinition

from .catalog import GamePassCatalog, GamePassConfig
from .delivery import CharacterDeliveryGateway
from .entitlements import EntitlementResolver
from .ledger import ClaimLedger
from .outcomes import ClaimOutcome, ClaimRequest, GamePassStatus, TrackOverview
from .processor import ClaimProcessor, utcnow
from .wallet import ZenWallet


def _flags(config: GamePassConfig) -> dict[str, bool]:
    return {
        "gamepassEnabled": config.gamepass_enabled,
        "eliteEnabled": config.elite_enabled,
        "goldEnabled": config.gold_enabled,
    }


def _serialize_definition(definition: GamePassRewardDefinition) -> dict[str, Any] | None:
    try:
        payload = payload_from_definition(definition)
    except InvalidRewardDefinition as error:
        logger.warning(
            "Skipping malformed game pass reward",
            reward_id=str(definition.id),
            day=definition.day,
            error=str(error),
        )
        return None
    return {
        "id": str(definition.id),
        "day": definition.day,
        "tier": PassTier(definition.tier).value,
        "name": definition.name,
        "rarity": definition.rarity,
        "icon": definition.icon,
        "reward": payload_as_dict(payload),
    }


class GamePassService:
    """Facade used by the HTTP layer; one instance per request session."""

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        delivery_gateway: CharacterDeliveryGateway | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._db = db_session
        self._delivery = delivery_gateway
        self._clock = clock
        self._catalog = GamePassCatalog(db_session)

    def _season(self, now: datetime) -> Season:
        return current_season(
            now,
            settings.gamepass_timezone,
            length_days=settings.gamepass_season_length_days,
        )

    async def get_status(self, user_id: UUID) -> GamePassStatus:
        """Snapshot of the caller's progress; performs no writes."""

        now = self._clock()
        season = self._season(now)
        config = await self._catalog.load_config()
        entitlement = await EntitlementResolver(self._db).resolve(user_id, now)
        claimed = await ClaimLedger(self._db).claimed_days(user_id, season)
        balance = await ZenWallet(self._db).balance(user_id)

        return GamePassStatus(
            current_day=current_day(now, season),
            season_start=season.key,
            season_ends_at=season.ends_at,
            days_remaining=days_remaining(now, season),
            claimed_days=claimed,
            effective_tier=entitlement.effective_tier,
            pass_expires_at=entitlement.expires_at,
            remaining_days=entitlement.remaining_days,
            zen_balance=balance,
            zen_cost_per_day=config.zen_cost_per_day,
            flags=_flags(config),
        )

    async def list_rewards(self) -> TrackOverview:
        """Public view of the active catalog and the season clock."""

        now = self._clock()
        season = self._season(now)
        config = await self._catalog.load_config()
        definitions = await self._catalog.list_definitions(catalog_version=config.catalog_version)
        rewards = [
            serialized
            for serialized in (_serialize_definition(definition) for definition in definitions)
            if serialized is not None
        ]
        return TrackOverview(
            current_day=current_day(now, season),
            season_start=season.key,
            season_ends_at=season.ends_at,
            days_remaining=days_remaining(now, season),
            zen_cost_per_day=config.zen_cost_per_day,
            catalog_version=config.catalog_version,
            flags=_flags(config),
            rewards=rewards,
        )

    async def claim(self, user_id: UUID, request: ClaimRequest) -> ClaimOutcome:
        processor = ClaimProcessor(
            self._db,
            delivery_gateway=self._delivery,
            clock=self._clock,
        )
        return await processor.claim(user_id, request)


__all__ = ["GamePassService"]
