"""API schemas for ads, products and purchases."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..entitlements import (
    Entitlement,
    Product,
    ProductKind,
    ProductType,
    PurchaseOutcome,
    PurchaseOutcomeStatus,
    StoreState,
)
from ..feature_gates import AdGateStatus


class AdStatusResponse(BaseModel):
    show_ads: bool = Field(alias="showAds")
    premium: bool
    status_text: str = Field(alias="statusText")
    status_icon: str = Field(alias="statusIcon")
    status_color: str = Field(alias="statusColor")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_status(cls, status: AdGateStatus) -> "AdStatusResponse":
        return cls(
            show_ads=status.show_ads,
            premium=status.premium,
            status_text=status.description,
            status_icon=status.icon,
            status_color=status.color,
        )


class ProductResponse(BaseModel):
    id: str
    display_name: str = Field(alias="displayName")
    display_price: str = Field(alias="displayPrice")
    price: Decimal
    kind: ProductKind

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            display_name=product.display_name,
            display_price=product.display_price,
            price=product.price,
            kind=product.kind,
        )


class TransactionResponse(BaseModel):
    transaction_id: str = Field(alias="transactionId")
    product_id: str = Field(alias="productId")
    product_type: ProductType = Field(alias="productType")
    purchased_at: datetime = Field(alias="purchasedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_entitlement(cls, entitlement: Entitlement) -> "TransactionResponse":
        return cls(
            transaction_id=entitlement.transaction_id,
            product_id=entitlement.product_id,
            product_type=entitlement.product_type,
            purchased_at=entitlement.purchased_at,
        )


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    last_error: Optional[str] = Field(default=None, alias="lastError")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_products(cls, products: Sequence[Product], *, last_error: Optional[str]) -> "ProductListResponse":
        return cls(
            products=[ProductResponse.from_product(product) for product in products],
            last_error=last_error,
        )


class OwnedProductsResponse(BaseModel):
    product_ids: List[str] = Field(alias="productIds")
    state: StoreState
    last_reconciled_at: Optional[datetime] = Field(default=None, alias="lastReconciledAt")

    model_config = ConfigDict(populate_by_name=True)


class PurchaseResponse(BaseModel):
    status: PurchaseOutcomeStatus
    product_id: str = Field(alias="productId")
    transaction: Optional[TransactionResponse] = None
    show_ads: bool = Field(alias="showAds")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_outcome(cls, outcome: PurchaseOutcome, *, show_ads: bool) -> "PurchaseResponse":
        return cls(
            status=outcome.status,
            product_id=outcome.product_id,
            transaction=(
                TransactionResponse.from_entitlement(outcome.entitlement)
                if outcome.entitlement is not None
                else None
            ),
            show_ads=show_ads,
        )
