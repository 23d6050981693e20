"""Game Pass progression and reward-claim services."""

from .catalog import GamePassCatalog, GamePassConfig  # noqa: F401
from .delivery import (  # noqa: F401
    CharacterDeliveryError,
    CharacterDeliveryGateway,
    DeliveryReceipt,
    HttpCharacterDeliveryClient,
)
from .entitlements import EntitlementResolver, ResolvedEntitlement  # noqa: F401
from .ledger import ClaimLedger, DuplicateClaimError  # noqa: F401
from .outcomes import (  # noqa: F401
    ClaimErrorCode,
    ClaimOutcome,
    ClaimRejection,
    ClaimRequest,
    ClaimResult,
    GamePassStatus,
    RewardGrant,
    TrackOverview,
)
from .processor import ClaimProcessor  # noqa: F401
from .service import GamePassService  # noqa: F401
from .wallet import InsufficientZenError, ZenWallet  # noqa: F401
