"""Feature gating utilities driven by entitlement state."""
from .ad_gate import (
    FREE_STATUS_ICON,
    FREE_STATUS_TEXT,
    PREMIUM_STATUS_ICON,
    PREMIUM_STATUS_TEXT,
    AdGate,
    AdGateStatus,
)

__all__ = [
    "AdGate",
    "AdGateStatus",
    "FREE_STATUS_ICON",
    "FREE_STATUS_TEXT",
    "PREMIUM_STATUS_ICON",
    "PREMIUM_STATUS_TEXT",
]
