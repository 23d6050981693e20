"""Game Pass season, tier, pricing, and reward rules."""

from .pricing import SkipAheadNotAllowed, days_ahead, skip_ahead_price  # noqa: F401
from .rewards import (  # noqa: F401
    CurrencyKind,
    CurrencyReward,
    InvalidRewardDefinition,
    ItemReward,
    RewardPayload,
    RewardType,
    SpinsReward,
    payload_as_dict,
    payload_from_definition,
)
from .season import Season, current_day, current_season, days_remaining  # noqa: F401
from .tiers import Entitlement, PassTier, effective_tier, tier_grants  # noqa: F401
