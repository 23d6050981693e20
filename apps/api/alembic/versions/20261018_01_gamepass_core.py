"""Game Pass catalog, entitlements, claim ledger, and balances.

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid() -> sa.types.TypeEngine:
    return postgresql.UUID(as_uuid=True)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "gamepass_settings",
        sa.Column("key", sa.String(length=64), primary_key=True),
        sa.Column("value", sa.String(), nullable=False),
        _timestamp("updated_at"),
    )

    op.create_table(
        "gamepass_rewards",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("catalog_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("reward_type", sa.String(length=16), nullable=False),
        sa.Column("currency_kind", sa.String(length=16), nullable=True),
        sa.Column("amount", sa.BigInteger(), nullable=True),
        sa.Column("item_id", sa.Integer(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rarity", sa.String(length=16), nullable=False, server_default="common"),
        sa.Column("icon", sa.String(length=32), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("catalog_version", "day", "tier", name="uq_gamepass_rewards_version_day_tier"),
        sa.CheckConstraint("day >= 1 AND day <= 30", name="ck_gamepass_rewards_day_range"),
    )
    op.create_index("ix_gamepass_rewards_catalog_version", "gamepass_rewards", ["catalog_version"])

    op.create_table(
        "gamepass_entitlements",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("source_reference", sa.String(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("user_id", name="uq_gamepass_entitlements_user_id"),
    )

    op.create_table(
        "gamepass_claims",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("season_start", sa.Date(), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("zen_spent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("character_id", sa.Integer(), nullable=True),
        sa.Column(
            "reward_id",
            _uuid(),
            sa.ForeignKey("gamepass_rewards.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("reward_snapshot", sa.JSON(), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "user_id",
            "season_start",
            "day",
            "tier",
            name="uq_gamepass_claims_user_season_day_tier",
        ),
        sa.CheckConstraint("day >= 1 AND day <= 30", name="ck_gamepass_claims_day_range"),
        sa.CheckConstraint("zen_spent >= 0", name="ck_gamepass_claims_zen_spent"),
    )
    op.create_index("ix_gamepass_claims_user_id", "gamepass_claims", ["user_id"])

    op.create_table(
        "zen_balances",
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("amount", sa.BigInteger(), nullable=False, server_default="0"),
        _timestamp("updated_at"),
        sa.CheckConstraint("amount >= 0", name="ck_zen_balances_non_negative"),
    )

    op.create_table(
        "currency_balances",
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("kind", sa.String(length=16), primary_key=True),
        sa.Column("amount", sa.BigInteger(), nullable=False, server_default="0"),
        _timestamp("updated_at"),
        sa.CheckConstraint("amount >= 0", name="ck_currency_balances_non_negative"),
    )

    op.create_table(
        "bonus_spin_grants",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "claim_id",
            _uuid(),
            sa.ForeignKey("gamepass_claims.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("spins", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False, server_default="gamepass"),
        sa.Column("granted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_bonus_spin_grants_user_id", "bonus_spin_grants", ["user_id"])

    op.create_table(
        "gamepass_item_deliveries",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column(
            "claim_id",
            _uuid(),
            sa.ForeignKey("gamepass_claims.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("character_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="queued"),
        sa.Column("delivery_reference", sa.String(), nullable=True),
        _timestamp("created_at"),
        sa.UniqueConstraint("claim_id", name="uq_gamepass_item_deliveries_claim_id"),
    )


def downgrade() -> None:
    op.drop_table("gamepass_item_deliveries")
    op.drop_index("ix_bonus_spin_grants_user_id", table_name="bonus_spin_grants")
    op.drop_table("bonus_spin_grants")
    op.drop_table("currency_balances")
    op.drop_table("zen_balances")
    op.drop_index("ix_gamepass_claims_user_id", table_name="gamepass_claims")
    op.drop_table("gamepass_claims")
    op.drop_table("gamepass_entitlements")
    op.drop_index("ix_gamepass_rewards_catalog_version", table_name="gamepass_rewards")
    op.drop_table("gamepass_rewards")
    op.drop_table("gamepass_settings")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
