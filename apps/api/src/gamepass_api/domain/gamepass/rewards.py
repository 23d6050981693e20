"""Reward payload variants granted by the Game Pass track."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Union


class RewardType(str, Enum):
    CURRENCY = "currency"
    ITEM = "item"
    SPINS = "spins"


class CurrencyKind(str, Enum):
    COINS = "coins"
    ZEN = "zen"
    EXP = "exp"


class InvalidRewardDefinition(ValueError):
    """Raised when a catalog row cannot be turned into a payload."""


@dataclass(frozen=True, slots=True)
class CurrencyReward:
    kind: CurrencyKind
    amount: int

    reward_type = RewardType.CURRENCY


@dataclass(frozen=True, slots=True)
class ItemReward:
    item_id: int
    quantity: int

    reward_type = RewardType.ITEM


@dataclass(frozen=True, slots=True)
class SpinsReward:
    count: int

    reward_type = RewardType.SPINS


RewardPayload = Union[CurrencyReward, ItemReward, SpinsReward]


class RewardDefinitionLike(Protocol):
    reward_type: RewardType
    currency_kind: CurrencyKind | None
    amount: int | None
    item_id: int | None
    quantity: int | None


def payload_from_definition(definition: RewardDefinitionLike) -> RewardPayload:
    """Build the payload variant for a catalog row, validating its columns."""

    reward_type = RewardType(definition.reward_type)
    if reward_type is RewardType.CURRENCY:
        if definition.currency_kind is None:
            raise InvalidRewardDefinition("Currency reward is missing its currency kind")
        amount = int(definition.amount or 0)
        if amount <= 0:
            raise InvalidRewardDefinition("Currency reward amount must be positive")
        return CurrencyReward(kind=CurrencyKind(definition.currency_kind), amount=amount)

    if reward_type is RewardType.ITEM:
        if definition.item_id is None or definition.item_id <= 0:
            raise InvalidRewardDefinition("Item reward requires a positive item id")
        quantity = int(definition.quantity or 0)
        if quantity <= 0:
            raise InvalidRewardDefinition("Item reward quantity must be positive")
        return ItemReward(item_id=int(definition.item_id), quantity=quantity)

    count = int(definition.quantity or definition.amount or 0)
    if count <= 0:
        raise InvalidRewardDefinition("Spin reward count must be positive")
    return SpinsReward(count=count)


def payload_as_dict(payload: RewardPayload) -> dict[str, Any]:
    """Flat JSON-friendly rendering, tagged by ``type``."""

    if isinstance(payload, CurrencyReward):
        return {"type": payload.reward_type.value, "kind": payload.kind.value, "amount": payload.amount}
    if isinstance(payload, ItemReward):
        return {"type": payload.reward_type.value, "itemId": payload.item_id, "quantity": payload.quantity}
    return {"type": payload.reward_type.value, "count": payload.count}


__all__ = [
    "CurrencyKind",
    "CurrencyReward",
    "InvalidRewardDefinition",
    "ItemReward",
    "RewardPayload",
    "RewardType",
    "SpinsReward",
    "payload_as_dict",
    "payload_from_definition",
]
