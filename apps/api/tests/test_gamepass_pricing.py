import pytest

from gamepass_api.domain.gamepass import PassTier, SkipAheadNotAllowed, days_ahead, skip_ahead_price


def test_price_scales_with_days_ahead() -> None:
    assert skip_ahead_price(8, 5, 100_000) == 300_000
    assert days_ahead(8, 5) == 3


def test_reached_days_are_free() -> None:
    assert skip_ahead_price(5, 5, 100_000) == 0
    assert skip_ahead_price(2, 5, 100_000) == 0
    assert days_ahead(2, 5) == 0


def test_zero_cost_setting_is_allowed() -> None:
    assert skip_ahead_price(30, 1, 0) == 0


def test_negative_cost_is_rejected() -> None:
    with pytest.raises(ValueError):
        skip_ahead_price(8, 5, -1)


@pytest.mark.parametrize("tier", [PassTier.ELITE, PassTier.GOLD])
def test_paid_tracks_cannot_skip_ahead(tier: PassTier) -> None:
    with pytest.raises(SkipAheadNotAllowed) as excinfo:
        skip_ahead_price(8, 5, 100_000, tier=tier)

    assert excinfo.value.tier is tier
