"""API routes exposing the ad gate, product catalog and purchases."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..entitlements import PurchaseOutcome, PurchaseOutcomeStatus, VerificationError
from ..schemas.monetization import (
    AdStatusResponse,
    OwnedProductsResponse,
    ProductListResponse,
    PurchaseResponse,
)
from ..services.monetization import MonetizationServices
from .dependencies import get_monetization_services

router = APIRouter(prefix="/api", tags=["monetization"])


def _owned_response(services: MonetizationServices) -> OwnedProductsResponse:
    store = services.store
    return OwnedProductsResponse(
        product_ids=sorted(store.owned_product_ids),
        state=store.state,
        last_reconciled_at=store.last_reconciled_at,
    )


@router.get("/ads/status", response_model=AdStatusResponse)
def read_ad_status(
    *,
    services: MonetizationServices = Depends(get_monetization_services),
) -> AdStatusResponse:
    return AdStatusResponse.from_status(services.ad_gate.snapshot())


@router.get("/subscriptions/products", response_model=ProductListResponse)
def list_products(
    *,
    services: MonetizationServices = Depends(get_monetization_services),
) -> ProductListResponse:
    catalog = services.catalog
    return ProductListResponse.from_products(catalog.products, last_error=catalog.last_error)


@router.post("/subscriptions/products/refresh", response_model=ProductListResponse)
async def refresh_products(
    *,
    services: MonetizationServices = Depends(get_monetization_services),
) -> ProductListResponse:
    products = await services.catalog.fetch_products()
    return ProductListResponse.from_products(products, last_error=services.catalog.last_error)


@router.get("/subscriptions/owned", response_model=OwnedProductsResponse)
def read_owned_products(
    *,
    services: MonetizationServices = Depends(get_monetization_services),
) -> OwnedProductsResponse:
    return _owned_response(services)


@router.post("/subscriptions/restore", response_model=OwnedProductsResponse)
async def restore_purchases(
    *,
    services: MonetizationServices = Depends(get_monetization_services),
) -> OwnedProductsResponse:
    await services.store.reconcile()
    return _owned_response(services)


@router.post("/subscriptions/{product_id}/purchase", response_model=PurchaseResponse)
async def purchase_product(
    product_id: str,
    *,
    services: MonetizationServices = Depends(get_monetization_services),
) -> PurchaseResponse:
    catalog = services.catalog
    if not catalog.knows(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown product")

    product = catalog.get(product_id)
    if product is None:
        await catalog.fetch_products()
        product = catalog.get(product_id)
    if product is None:
        outcome = PurchaseOutcome(status=PurchaseOutcomeStatus.STORE_UNAVAILABLE, product_id=product_id)
        return PurchaseResponse.from_outcome(outcome, show_ads=services.ad_gate.should_show_ads())

    try:
        outcome = await services.store.purchase(product)
    except VerificationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    return PurchaseResponse.from_outcome(outcome, show_ads=services.ad_gate.should_show_ads())
