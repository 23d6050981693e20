from types import SimpleNamespace

import pytest

from gamepass_api.domain.gamepass import (
    CurrencyKind,
    CurrencyReward,
    InvalidRewardDefinition,
    ItemReward,
    RewardType,
    SpinsReward,
    payload_as_dict,
    payload_from_definition,
)


def _definition(**overrides):
    values = {
        "reward_type": RewardType.CURRENCY,
        "currency_kind": None,
        "amount": None,
        "item_id": None,
        "quantity": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_currency_definition_builds_currency_payload() -> None:
    payload = payload_from_definition(_definition(currency_kind="coins", amount=5000))

    assert payload == CurrencyReward(kind=CurrencyKind.COINS, amount=5000)
    assert payload_as_dict(payload) == {"type": "currency", "kind": "coins", "amount": 5000}


def test_item_definition_builds_item_payload() -> None:
    payload = payload_from_definition(_definition(reward_type="item", item_id=2042, quantity=3))

    assert payload == ItemReward(item_id=2042, quantity=3)
    assert payload_as_dict(payload) == {"type": "item", "itemId": 2042, "quantity": 3}


def test_spins_definition_reads_quantity() -> None:
    payload = payload_from_definition(_definition(reward_type=RewardType.SPINS, quantity=2))

    assert payload == SpinsReward(count=2)
    assert payload_as_dict(payload) == {"type": "spins", "count": 2}


@pytest.mark.parametrize(
    "overrides",
    [
        {"currency_kind": None, "amount": 100},
        {"currency_kind": "zen", "amount": 0},
        {"reward_type": "item", "item_id": None, "quantity": 1},
        {"reward_type": "item", "item_id": 10, "quantity": 0},
        {"reward_type": "spins", "quantity": None, "amount": None},
    ],
)
def test_malformed_definitions_are_rejected(overrides) -> None:
    with pytest.raises(InvalidRewardDefinition):
        payload_from_definition(_definition(**overrides))
