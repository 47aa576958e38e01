"""Ad gate deciding whether advertising surfaces render."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from pydantic import BaseModel, ConfigDict

from ..entitlements import EntitlementStore

PREMIUM_STATUS_TEXT = "Premium User - Ads Disabled"
FREE_STATUS_TEXT = "Free User - Ads Enabled"
PREMIUM_STATUS_ICON = "checkmark.circle.fill"
FREE_STATUS_ICON = "xmark.circle.fill"


class AdGateStatus(BaseModel):
    """Point-in-time view of the gate for display surfaces."""

    show_ads: bool
    premium: bool
    description: str
    icon: str
    color: str

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class AdGate:
    """Facade over the shared entitlement store for ad-displaying surfaces.

    Nothing is cached here; every read goes to the store's current owned set,
    so a finished reconciliation is visible on the next call.
    """

    store: EntitlementStore

    @property
    def is_premium(self) -> bool:
        return bool(self.store.owned_product_ids)

    def should_show_ads(self) -> bool:
        return not self.is_premium

    def status_description(self) -> str:
        return PREMIUM_STATUS_TEXT if self.is_premium else FREE_STATUS_TEXT

    def status_icon(self) -> str:
        return PREMIUM_STATUS_ICON if self.is_premium else FREE_STATUS_ICON

    def status_color(self) -> str:
        return "green" if self.is_premium else "red"

    def feature_flags(self) -> Dict[str, bool]:
        return {"ads.disabled": self.is_premium}

    def snapshot(self) -> AdGateStatus:
        return AdGateStatus(
            show_ads=self.should_show_ads(),
            premium=self.is_premium,
            description=self.status_description(),
            icon=self.status_icon(),
            color=self.status_color(),
        )
