"""Zen and currency balances touched by claims."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from gamepass_api.domain.gamepass.rewards import CurrencyKind
from gamepass_api.models.gamepass import CurrencyBalance, ZenBalance


class InsufficientZenError(RuntimeError):
    """Raised when a debit would take a balance below zero."""

    def __init__(self, user_id: UUID, amount: int) -> None:
        super().__init__(f"Insufficient Zen to debit {amount}")
        self.user_id = user_id
        self.amount = amount


class ZenWallet:
    """Integer-only balance operations; callers own the transaction."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    def _insert(self, model):  # noqa: ANN001
        if self._db.get_bind().dialect.name == "sqlite":
            return sqlite.insert(model)
        return postgresql.insert(model)

    async def balance(self, user_id: UUID) -> int:
        stmt = select(ZenBalance.amount).where(ZenBalance.user_id == user_id)
        result = await self._db.execute(stmt)
        amount = result.scalar_one_or_none()
        return int(amount or 0)

    async def debit(self, user_id: UUID, amount: int) -> None:
        """Subtract ``amount`` in one conditional update; no-op for zero."""

        if amount < 0:
            raise ValueError("Debit amount must be non-negative")
        if amount == 0:
            return

        stmt = (
            update(ZenBalance)
            .where(ZenBalance.user_id == user_id, ZenBalance.amount >= amount)
            .values(amount=ZenBalance.amount - amount)
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)
        if result.rowcount != 1:
            raise InsufficientZenError(user_id, amount)

    async def credit(self, user_id: UUID, amount: int) -> None:
        """Add ``amount``; a missing balance row is created by the same statement."""

        if amount < 0:
            raise ValueError("Credit amount must be non-negative")
        if amount == 0:
            return

        stmt = (
            self._insert(ZenBalance)
            .values(user_id=user_id, amount=amount)
            .on_conflict_do_update(
                index_elements=[ZenBalance.user_id],
                set_={"amount": ZenBalance.amount + amount, "updated_at": func.now()},
            )
        )
        await self._db.execute(stmt)

    async def currency_balance(self, user_id: UUID, kind: CurrencyKind) -> int:
        if kind is CurrencyKind.ZEN:
            return await self.balance(user_id)
        stmt = select(CurrencyBalance.amount).where(
            CurrencyBalance.user_id == user_id,
            CurrencyBalance.kind == kind,
        )
        result = await self._db.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    async def credit_currency(self, user_id: UUID, kind: CurrencyKind, amount: int) -> None:
        """Credit coins/exp; Zen is routed to :meth:`credit`."""

        if kind is CurrencyKind.ZEN:
            await self.credit(user_id, amount)
            return
        if amount < 0:
            raise ValueError("Credit amount must be non-negative")
        if amount == 0:
            return

        stmt = (
            self._insert(CurrencyBalance)
            .values(user_id=user_id, kind=kind, amount=amount)
            .on_conflict_do_update(
                index_elements=[CurrencyBalance.user_id, CurrencyBalance.kind],
                set_={"amount": CurrencyBalance.amount + amount, "updated_at": func.now()},
            )
        )
        await self._db.execute(stmt)


__all__ = ["InsufficientZenError", "ZenWallet"]
