"""Claim transaction processor: validation, debit, ledger, and grant as one unit."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from gamepass_api.core.logging import claim_log_context
from gamepass_api.core.settings import settings
from gamepass_api.domain.gamepass.pricing import days_ahead, skip_ahead_price
from gamepass_api.domain.gamepass.rewards import (
    CurrencyReward,
    InvalidRewardDefinition,
    ItemReward,
    RewardPayload,
    SpinsReward,
    payload_as_dict,
    payload_from_definition,
)
from gamepass_api.domain.gamepass.season import Season, current_day, current_season
from gamepass_api.domain.gamepass.tiers import PassTier, tier_grants
from gamepass_api.models.gamepass import (
    BonusSpinGrant,
    GamePassClaim,
    GamePassItemDelivery,
    GamePassRewardDefinition,
    ItemDeliveryStatus,
)
from gamepass_api.observability.gamepass import GamePassObservabilityStore, get_gamepass_store

from .catalog import GamePassCatalog
from .delivery import CharacterDeliveryGateway
from .entitlements import EntitlementResolver
from .ledger import ClaimLedger, DuplicateClaimError
from .outcomes import (
    ClaimErrorCode,
    ClaimOutcome,
    ClaimRejection,
    ClaimRequest,
    ClaimResult,
    RewardGrant,
)
from .wallet import InsufficientZenError, ZenWallet


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _DeliveryFailed(RuntimeError):
    """Internal signal that unwinds the claim transaction."""


@dataclass
class _AttemptState:
    delivery_reference: str | None = None

    @property
    def has_external_effects(self) -> bool:
        return self.delivery_reference is not None


class ClaimProcessor:
    """Runs a single claim for an authenticated user.

    The processor owns the session's transaction: it commits on success and
    rolls back on every failure after the first write. Rejections are returned
    as :class:`ClaimRejection` values; only storage failures raise.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        delivery_gateway: CharacterDeliveryGateway | None = None,
        clock: Callable[[], datetime] = utcnow,
        timezone_name: str | None = None,
        season_length_days: int | None = None,
        max_attempts: int | None = None,
        store: GamePassObservabilityStore | None = None,
    ) -> None:
        self._db = db_session
        self._delivery = delivery_gateway
        self._clock = clock
        self._timezone = timezone_name or settings.gamepass_timezone
        self._season_length = season_length_days or settings.gamepass_season_length_days
        self._max_attempts = max(1, max_attempts or settings.gamepass_claim_max_attempts)
        self._store = store or get_gamepass_store()
        self._catalog = GamePassCatalog(db_session)
        self._entitlements = EntitlementResolver(db_session)
        self._ledger = ClaimLedger(db_session)
        self._wallet = ZenWallet(db_session)

    async def claim(self, user_id: UUID, request: ClaimRequest) -> ClaimOutcome:
        with claim_log_context(user_id, day=request.day, tier=request.tier.value):
            return await self._claim(user_id, request)

    async def _claim(self, user_id: UUID, request: ClaimRequest) -> ClaimOutcome:
        if not 1 <= request.day <= self._season_length:
            return self._reject(
                user_id,
                request,
                ClaimErrorCode.INVALID_DAY,
                f"Day must be between 1 and {self._season_length}",
            )

        for attempt in range(1, self._max_attempts + 1):
            state = _AttemptState()
            try:
                return await self._attempt(user_id, request, state)
            except IntegrityError:
                await self._db.rollback()
                logger.exception(
                    "Game pass claim violated a storage constraint",
                    attempt=attempt,
                    delivery_reference=state.delivery_reference,
                )
                raise
            except OperationalError:
                await self._db.rollback()
                if state.has_external_effects or attempt >= self._max_attempts:
                    logger.exception(
                        "Game pass claim failed on storage",
                        user_id=str(user_id),
                        day=request.day,
                        tier=request.tier.value,
                        attempt=attempt,
                        delivery_reference=state.delivery_reference,
                    )
                    raise
                self._store.record_retry()
                logger.warning(
                    "Retrying game pass claim after transient storage conflict",
                    user_id=str(user_id),
                    day=request.day,
                    tier=request.tier.value,
                    attempt=attempt,
                )
        raise RuntimeError("unreachable")  # pragma: no cover

    async def _attempt(self, user_id: UUID, request: ClaimRequest, state: _AttemptState) -> ClaimOutcome:
        now = self._clock()
        season = current_season(now, self._timezone, length_days=self._season_length)
        today = current_day(now, season)
        entitlement = await self._entitlements.resolve(user_id, now)
        config = await self._catalog.load_config()

        if await self._ledger.has_claimed(user_id, season, request.day, request.tier):
            return self._already_claimed(user_id, request)

        if not config.track_enabled(request.tier):
            return self._reject(
                user_id,
                request,
                ClaimErrorCode.PASS_DISABLED,
                f"The {request.tier.value} track is currently disabled",
            )

        if not tier_grants(entitlement.effective_tier, request.tier):
            label = request.tier.value.capitalize()
            return self._reject(
                user_id,
                request,
                ClaimErrorCode.TIER_NOT_ENTITLED,
                f"{label} rewards require an active {label} Game Pass",
            )

        zen_cost = 0
        if request.day > today:
            if request.tier is not PassTier.FREE:
                return self._reject(
                    user_id,
                    request,
                    ClaimErrorCode.DAY_NOT_YET_REACHABLE,
                    f"{request.tier.value.capitalize()} rewards unlock on their scheduled day",
                )
            zen_cost = skip_ahead_price(request.day, today, config.zen_cost_per_day)
            ahead = days_ahead(request.day, today)
            if not request.pay_with_zen:
                return self._reject(
                    user_id,
                    request,
                    ClaimErrorCode.SKIP_AHEAD_CONFIRMATION_REQUIRED,
                    "This day is locked. Pay Zen to unlock early.",
                    zen_cost=zen_cost,
                    days_ahead=ahead,
                )
            balance = await self._wallet.balance(user_id)
            if balance < zen_cost:
                return self._reject(
                    user_id,
                    request,
                    ClaimErrorCode.INSUFFICIENT_ZEN,
                    "Insufficient Zen balance",
                    zen_cost=zen_cost,
                    days_ahead=ahead,
                    zen_balance=balance,
                )

        definition = await self._catalog.get_definition(
            request.day,
            request.tier,
            catalog_version=config.catalog_version,
        )
        if definition is None:
            return self._catalog_fault(user_id, request, config.catalog_version, "No reward configured for this day")
        try:
            payload = payload_from_definition(definition)
        except InvalidRewardDefinition as error:
            return self._catalog_fault(user_id, request, config.catalog_version, str(error))

        if isinstance(payload, ItemReward):
            target_error = await self._check_delivery_target(user_id, request)
            if target_error is not None:
                return target_error

        return await self._commit_claim(
            user_id,
            request,
            season=season,
            now=now,
            zen_cost=zen_cost,
            definition=definition,
            payload=payload,
            state=state,
        )

    async def _commit_claim(
        self,
        user_id: UUID,
        request: ClaimRequest,
        *,
        season: Season,
        now: datetime,
        zen_cost: int,
        definition: GamePassRewardDefinition,
        payload: RewardPayload,
        state: _AttemptState,
    ) -> ClaimOutcome:
        snapshot = {"name": definition.name, **payload_as_dict(payload)}
        try:
            await self._wallet.debit(user_id, zen_cost)
            claim = await self._ledger.record(
                user_id,
                season,
                request.day,
                request.tier,
                zen_spent=zen_cost,
                claimed_at=now,
                character_id=request.character_id,
                reward_id=definition.id,
                reward_snapshot=snapshot,
            )
            await self._apply_reward(user_id, claim, payload, request, state)
            zen_balance = await self._wallet.balance(user_id)
            await self._db.commit()
        except InsufficientZenError:
            await self._db.rollback()
            balance = await self._wallet.balance(user_id)
            return self._reject(
                user_id,
                request,
                ClaimErrorCode.INSUFFICIENT_ZEN,
                "Insufficient Zen balance",
                zen_cost=zen_cost,
                zen_balance=balance,
            )
        except DuplicateClaimError:
            return self._already_claimed(user_id, request)
        except _DeliveryFailed as failure:
            await self._db.rollback()
            logger.warning(
                "Game pass reward delivery failed; claim rolled back",
                user_id=str(user_id),
                day=request.day,
                tier=request.tier.value,
                character_id=request.character_id,
                reason=str(failure),
            )
            self._store.record_outcome(ClaimErrorCode.DELIVERY_FAILED.value)
            return ClaimRejection(
                code=ClaimErrorCode.DELIVERY_FAILED,
                message="Failed to deliver reward. Please try again.",
            )

        self._store.record_grant(payload.reward_type.value, zen_cost)
        logger.info(
            "Game pass reward claimed",
            user_id=str(user_id),
            claim_id=str(claim.id),
            day=request.day,
            tier=request.tier.value,
            reward_type=payload.reward_type.value,
            zen_spent=zen_cost,
        )
        return ClaimResult(
            day=request.day,
            tier=request.tier,
            reward=RewardGrant(
                reward_id=definition.id,
                name=definition.name,
                payload=payload,
                rarity=definition.rarity,
                icon=definition.icon,
            ),
            zen_spent=zen_cost,
            zen_balance=zen_balance,
            claim_id=claim.id,
        )

    async def _apply_reward(
        self,
        user_id: UUID,
        claim: GamePassClaim,
        payload: RewardPayload,
        request: ClaimRequest,
        state: _AttemptState,
    ) -> None:
        if isinstance(payload, CurrencyReward):
            await self._wallet.credit_currency(user_id, payload.kind, payload.amount)
            return

        if isinstance(payload, SpinsReward):
            self._db.add(BonusSpinGrant(user_id=user_id, claim_id=claim.id, spins=payload.count))
            await self._db.flush()
            return

        # Item rewards: write the outbox row first so a storage error never follows a sent mail.
        delivery = GamePassItemDelivery(
            claim_id=claim.id,
            user_id=user_id,
            character_id=request.character_id,
            item_id=payload.item_id,
            quantity=payload.quantity,
            status=ItemDeliveryStatus.QUEUED,
        )
        self._db.add(delivery)
        await self._db.flush()

        if self._delivery is None:
            raise _DeliveryFailed("Character delivery gateway is not configured")
        receipt = await self._delivery.deliver_item(
            request.character_id,
            payload.item_id,
            payload.quantity,
            reference=str(claim.id),
            title=f"Game Pass Day {request.day} Reward",
        )
        if not receipt.success:
            raise _DeliveryFailed(receipt.message or "Delivery rejected")

        state.delivery_reference = receipt.reference or str(claim.id)
        delivery.status = ItemDeliveryStatus.SENT
        delivery.delivery_reference = state.delivery_reference
        await self._db.flush()

    async def _check_delivery_target(self, user_id: UUID, request: ClaimRequest) -> ClaimRejection | None:
        if request.character_id is None or request.character_id <= 0:
            return self._reject(
                user_id,
                request,
                ClaimErrorCode.INVALID_DELIVERY_TARGET,
                "Please select a character to receive the reward",
            )
        if self._delivery is None:
            return None
        if not await self._delivery.verify_character(user_id, request.character_id):
            return self._reject(
                user_id,
                request,
                ClaimErrorCode.INVALID_DELIVERY_TARGET,
                "Invalid character selected. Please choose a valid character.",
            )
        return None

    def _already_claimed(self, user_id: UUID, request: ClaimRequest) -> ClaimResult:
        self._store.record_outcome(ClaimErrorCode.ALREADY_CLAIMED.value)
        logger.info(
            "Game pass claim already recorded",
            user_id=str(user_id),
            day=request.day,
            tier=request.tier.value,
        )
        return ClaimResult(day=request.day, tier=request.tier, reward=None, already_claimed=True)

    def _catalog_fault(
        self,
        user_id: UUID,
        request: ClaimRequest,
        catalog_version: int,
        message: str,
    ) -> ClaimRejection:
        self._store.record_outcome(ClaimErrorCode.CATALOG_MISSING.value)
        logger.error(
            "Game pass catalog fault",
            user_id=str(user_id),
            day=request.day,
            tier=request.tier.value,
            catalog_version=catalog_version,
            reason=message,
        )
        return ClaimRejection(code=ClaimErrorCode.CATALOG_MISSING, message=message)

    def _reject(
        self,
        user_id: UUID,
        request: ClaimRequest,
        code: ClaimErrorCode,
        message: str,
        **details: int,
    ) -> ClaimRejection:
        self._store.record_outcome(code.value)
        logger.info(
            "Game pass claim rejected",
            user_id=str(user_id),
            day=request.day,
            tier=request.tier.value,
            code=code.value,
        )
        return ClaimRejection(code=code, message=message, **details)


__all__ = ["ClaimProcessor", "utcnow"]
