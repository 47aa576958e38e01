"""Entitlements domain models and services."""

from .catalog import (
    MONTHLY_PRODUCT_ID,
    PRODUCT_DEFINITIONS,
    PRODUCT_IDS,
    YEARLY_PRODUCT_ID,
    ProductCatalog,
    ProductDefinition,
    get_product_definition,
)
from .exceptions import StoreError, StoreUnavailable, VerificationError
from .models import (
    Entitlement,
    Product,
    ProductKind,
    ProductType,
    PurchaseOutcome,
    PurchaseOutcomeStatus,
    PurchaseResult,
    PurchaseStatus,
    StoreState,
    VerificationStatus,
)
from .service import EntitlementStore, StoreClient, check_verified

__all__ = [
    "MONTHLY_PRODUCT_ID",
    "PRODUCT_DEFINITIONS",
    "PRODUCT_IDS",
    "YEARLY_PRODUCT_ID",
    "ProductCatalog",
    "ProductDefinition",
    "get_product_definition",
    "StoreError",
    "StoreUnavailable",
    "VerificationError",
    "Entitlement",
    "Product",
    "ProductKind",
    "ProductType",
    "PurchaseOutcome",
    "PurchaseOutcomeStatus",
    "PurchaseResult",
    "PurchaseStatus",
    "StoreState",
    "VerificationStatus",
    "EntitlementStore",
    "StoreClient",
    "check_verified",
]
