"""SQLAlchemy models package."""

from .gamepass import (  # noqa: F401
    BonusSpinGrant,
    CurrencyBalance,
    GamePassClaim,
    GamePassItemDelivery,
    GamePassRewardDefinition,
    GamePassSetting,
    ItemDeliveryStatus,
    UserPassEntitlement,
    ZenBalance,
)
from .user import User  # noqa: F401
