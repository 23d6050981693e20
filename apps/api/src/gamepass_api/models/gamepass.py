"""Game Pass catalog, entitlement, ledger, and balance tables."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from gamepass_api.db.base import Base
from gamepass_api.domain.gamepass.rewards import CurrencyKind, RewardType
from gamepass_api.domain.gamepass.tiers import PassTier


def _enum_column(enum_cls: type[Enum], name: str) -> SqlEnum:
    return SqlEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=16,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class ItemDeliveryStatus(str, Enum):
    """Lifecycle of an in-game mail delivery enqueued by a claim."""

    QUEUED = "queued"
    SENT = "sent"


class GamePassSetting(Base):
    """Global key/value settings authored by operators."""

    __tablename__ = "gamepass_settings"

    key = Column(String(64), primary_key=True)
    value = Column(String, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class GamePassRewardDefinition(Base):
    """Reward configured for one day of one track within a catalog version."""

    __tablename__ = "gamepass_rewards"
    __table_args__ = (
        UniqueConstraint("catalog_version", "day", "tier", name="uq_gamepass_rewards_version_day_tier"),
        CheckConstraint("day >= 1 AND day <= 30", name="ck_gamepass_rewards_day_range"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    catalog_version = Column(Integer, nullable=False, default=1, server_default="1", index=True)
    day = Column(Integer, nullable=False)
    tier = Column(_enum_column(PassTier, "gamepass_tier"), nullable=False)
    reward_type = Column(_enum_column(RewardType, "gamepass_reward_type"), nullable=False)
    currency_kind = Column(_enum_column(CurrencyKind, "gamepass_currency_kind"), nullable=True)
    amount = Column(BigInteger, nullable=True)
    item_id = Column(Integer, nullable=True)
    quantity = Column(Integer, nullable=True)
    name = Column(String, nullable=False)
    rarity = Column(String(16), nullable=False, default="common", server_default="common")
    icon = Column(String(32), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class UserPassEntitlement(Base):
    """Purchased pass tier for a user; written by the purchase flow only."""

    __tablename__ = "gamepass_entitlements"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_gamepass_entitlements_user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    tier = Column(_enum_column(PassTier, "gamepass_tier"), nullable=False, default=PassTier.FREE)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    source_reference = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class GamePassClaim(Base):
    """Append-only proof that a (user, season, day, tier) reward was redeemed."""

    __tablename__ = "gamepass_claims"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "season_start",
            "day",
            "tier",
            name="uq_gamepass_claims_user_season_day_tier",
        ),
        CheckConstraint("day >= 1 AND day <= 30", name="ck_gamepass_claims_day_range"),
        CheckConstraint("zen_spent >= 0", name="ck_gamepass_claims_zen_spent"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    season_start = Column(Date, nullable=False)
    day = Column(Integer, nullable=False)
    tier = Column(_enum_column(PassTier, "gamepass_tier"), nullable=False)
    zen_spent = Column(BigInteger, nullable=False, default=0, server_default="0")
    character_id = Column(Integer, nullable=True)
    reward_id = Column(UUID(as_uuid=True), ForeignKey("gamepass_rewards.id", ondelete="SET NULL"), nullable=True)
    reward_snapshot = Column(JSON, nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    item_delivery = relationship("GamePassItemDelivery", back_populates="claim", uselist=False)


class ZenBalance(Base):
    """Spendable Zen per account; never negative."""

    __tablename__ = "zen_balances"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_zen_balances_non_negative"),
    )

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    amount = Column(BigInteger, nullable=False, default=0, server_default="0")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class CurrencyBalance(Base):
    """Non-Zen currencies (coins, exp) credited by rewards."""

    __tablename__ = "currency_balances"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_currency_balances_non_negative"),
    )

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    kind = Column(_enum_column(CurrencyKind, "gamepass_currency_kind"), primary_key=True)
    amount = Column(BigInteger, nullable=False, default=0, server_default="0")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class BonusSpinGrant(Base):
    """Lucky wheel spins granted by a claim."""

    __tablename__ = "bonus_spin_grants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    claim_id = Column(UUID(as_uuid=True), ForeignKey("gamepass_claims.id", ondelete="CASCADE"), nullable=True)
    spins = Column(Integer, nullable=False)
    source = Column(String(32), nullable=False, default="gamepass", server_default="gamepass")
    granted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GamePassItemDelivery(Base):
    """Outbox row for an item mailed to an in-game character."""

    __tablename__ = "gamepass_item_deliveries"
    __table_args__ = (
        UniqueConstraint("claim_id", name="uq_gamepass_item_deliveries_claim_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    claim_id = Column(UUID(as_uuid=True), ForeignKey("gamepass_claims.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    character_id = Column(Integer, nullable=False)
    item_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    status = Column(
        _enum_column(ItemDeliveryStatus, "gamepass_item_delivery_status"),
        nullable=False,
        default=ItemDeliveryStatus.QUEUED,
        server_default=ItemDeliveryStatus.QUEUED.value,
    )
    delivery_reference = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    claim = relationship("GamePassClaim", back_populates="item_delivery")
