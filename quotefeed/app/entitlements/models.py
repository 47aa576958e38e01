"""Domain models for products, entitlements and purchase outcomes."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductKind(str, Enum):
    """Subscription SKUs offered by the app."""

    SUBSCRIPTION_MONTHLY = "subscription-monthly"
    SUBSCRIPTION_YEARLY = "subscription-yearly"


class ProductType(str, Enum):
    """Classification the store ledger attaches to each transaction."""

    AUTO_RENEWABLE = "auto_renewable"
    NON_RENEWING = "non_renewing"
    NON_CONSUMABLE = "non_consumable"
    CONSUMABLE = "consumable"


class VerificationStatus(str, Enum):
    """Outcome of the store-provided proof check."""

    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class StoreState(str, Enum):
    """Lifecycle of the entitlement store within a session."""

    IDLE = "idle"
    LISTENING = "listening"
    RECONCILING = "reconciling"


class Product(BaseModel):
    """A priced product as resolved by the external store."""

    id: str
    display_name: str = ""
    display_price: str
    price: Decimal
    kind: ProductKind

    model_config = ConfigDict(frozen=True)

    @field_validator("price")
    @classmethod
    def _validate_price(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("price must be >= 0")
        return value


class Entitlement(BaseModel):
    """A ledger transaction claiming ownership of a product."""

    transaction_id: str = Field(default_factory=lambda: f"txn_{uuid4().hex}")
    product_id: str
    product_type: ProductType = ProductType.AUTO_RENEWABLE
    verification: VerificationStatus = VerificationStatus.VERIFIED
    verification_error: Optional[str] = None
    purchased_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @property
    def is_verified(self) -> bool:
        return self.verification == VerificationStatus.VERIFIED

    @property
    def is_subscription(self) -> bool:
        return self.product_type == ProductType.AUTO_RENEWABLE


class PurchaseStatus(str, Enum):
    """Raw result of a buy flow as reported by the store."""

    SUCCESS = "success"
    USER_CANCELLED = "user_cancelled"
    PENDING = "pending"


class PurchaseResult(BaseModel):
    """Return value of :meth:`StoreClient.buy`."""

    status: PurchaseStatus
    entitlement: Optional[Entitlement] = None

    model_config = ConfigDict(frozen=True)


class PurchaseOutcomeStatus(str, Enum):
    """Outcome of :meth:`EntitlementStore.purchase` as seen by callers."""

    PURCHASED = "purchased"
    USER_CANCELLED = "user_cancelled"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    STORE_UNAVAILABLE = "store_unavailable"


class PurchaseOutcome(BaseModel):
    """Typed purchase result; every status but ``purchased`` is a no-op."""

    status: PurchaseOutcomeStatus
    product_id: str
    entitlement: Optional[Entitlement] = None

    model_config = ConfigDict(frozen=True)

    @property
    def has_transaction(self) -> bool:
        return self.status == PurchaseOutcomeStatus.PURCHASED and self.entitlement is not None
