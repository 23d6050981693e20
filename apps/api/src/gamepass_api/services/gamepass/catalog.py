"""Read-only access to the reward catalog and operator settings."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.core.settings import settings
from gamepass_api.domain.gamepass.tiers import PassTier
from gamepass_api.models.gamepass import GamePassRewardDefinition, GamePassSetting


SETTING_ZEN_SKIP_COST = "zen_skip_cost"
SETTING_CATALOG_VERSION = "catalog_version"
SETTING_GAMEPASS_ENABLED = "gamepass_enabled"
SETTING_ELITE_ENABLED = "elite_enabled"
SETTING_GOLD_ENABLED = "gold_enabled"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GamePassConfig:
    """Operator settings resolved for a single request."""

    zen_cost_per_day: int
    catalog_version: int
    gamepass_enabled: bool = True
    elite_enabled: bool = True
    gold_enabled: bool = True

    def track_enabled(self, tier: PassTier) -> bool:
        if not self.gamepass_enabled:
            return False
        if tier is PassTier.ELITE:
            return self.elite_enabled
        if tier is PassTier.GOLD:
            return self.gold_enabled
        return True


def _parse_int(raw: str | None, *, default: int, key: str) -> int:
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed game pass setting", key=key, value=raw)
        return default
    if value < 0:
        logger.warning("Ignoring negative game pass setting", key=key, value=raw)
        return default
    return value


def _parse_flag(raw: str | None, *, default: bool = True) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


class GamePassCatalog:
    """Loads reward definitions and settings; never mutates them."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    async def load_config(self) -> GamePassConfig:
        stmt = select(GamePassSetting.key, GamePassSetting.value)
        result = await self._db.execute(stmt)
        values = {key: value for key, value in result.all()}
        return GamePassConfig(
            zen_cost_per_day=_parse_int(
                values.get(SETTING_ZEN_SKIP_COST),
                default=settings.gamepass_zen_cost_per_day,
                key=SETTING_ZEN_SKIP_COST,
            ),
            catalog_version=_parse_int(
                values.get(SETTING_CATALOG_VERSION),
                default=settings.gamepass_catalog_version,
                key=SETTING_CATALOG_VERSION,
            ),
            gamepass_enabled=_parse_flag(values.get(SETTING_GAMEPASS_ENABLED)),
            elite_enabled=_parse_flag(values.get(SETTING_ELITE_ENABLED)),
            gold_enabled=_parse_flag(values.get(SETTING_GOLD_ENABLED)),
        )

    async def get_definition(
        self,
        day: int,
        tier: PassTier,
        *,
        catalog_version: int,
    ) -> GamePassRewardDefinition | None:
        stmt = select(GamePassRewardDefinition).where(
            GamePassRewardDefinition.catalog_version == catalog_version,
            GamePassRewardDefinition.day == day,
            GamePassRewardDefinition.tier == tier,
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_definitions(self, *, catalog_version: int) -> list[GamePassRewardDefinition]:
        """Return the active catalog ordered by day then tier rank."""

        stmt = select(GamePassRewardDefinition).where(
            GamePassRewardDefinition.catalog_version == catalog_version
        )
        result = await self._db.execute(stmt)
        definitions = sorted(
            result.scalars().all(),
            key=lambda definition: (definition.day, PassTier(definition.tier).rank),
        )
        logger.debug("Fetched game pass catalog", count=len(definitions), catalog_version=catalog_version)
        return definitions


__all__ = [
    "GamePassCatalog",
    "GamePassConfig",
    "SETTING_CATALOG_VERSION",
    "SETTING_ELITE_ENABLED",
    "SETTING_GAMEPASS_ENABLED",
    "SETTING_GOLD_ENABLED",
    "SETTING_ZEN_SKIP_COST",
]
