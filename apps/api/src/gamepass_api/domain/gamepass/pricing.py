"""Zen pricing for unlocking free-track days ahead of schedule."""

from __future__ import annotations

from .tiers import PassTier


class SkipAheadNotAllowed(ValueError):
    """Raised when a skip-ahead quote is requested for a paid track."""

    def __init__(self, tier: PassTier) -> None:
        super().__init__(f"Skip-ahead is only available on the free track, not {tier.value}")
        self.tier = tier


def days_ahead(day: int, current_day: int) -> int:
    return max(0, day - current_day)


def skip_ahead_price(
    day: int,
    current_day: int,
    zen_cost_per_day: int,
    *,
    tier: PassTier = PassTier.FREE,
) -> int:
    """Zen owed to claim ``day`` now; zero for days already reached."""

    if tier is not PassTier.FREE:
        raise SkipAheadNotAllowed(tier)
    if zen_cost_per_day < 0:
        raise ValueError("zen_cost_per_day must be non-negative")
    return days_ahead(day, current_day) * int(zen_cost_per_day)


__all__ = ["SkipAheadNotAllowed", "days_ahead", "skip_ahead_price"]
