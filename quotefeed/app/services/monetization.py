"""Application wiring for the catalog, entitlement store and ad gate."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from typing import AsyncIterator, Deque, Dict, List, Optional, Sequence, Tuple

from ..entitlements import (
    MONTHLY_PRODUCT_ID,
    YEARLY_PRODUCT_ID,
    Entitlement,
    EntitlementStore,
    Product,
    ProductCatalog,
    ProductType,
    PurchaseResult,
    PurchaseStatus,
    StoreClient,
    StoreUnavailable,
    VerificationStatus,
    get_product_definition,
)
from ..feature_gates import AdGate


logger = logging.getLogger("monetization")


def _sandbox_product(product_id: str, price: str) -> Product:
    definition = get_product_definition(product_id)
    return Product(
        id=product_id,
        display_name=definition.display_name,
        display_price=f"${price}",
        price=Decimal(price),
        kind=definition.kind,
    )


SANDBOX_PRODUCTS: Tuple[Product, ...] = (
    _sandbox_product(MONTHLY_PRODUCT_ID, "4.99"),
    _sandbox_product(YEARLY_PRODUCT_ID, "39.99"),
)


class LocalSandboxStoreClient(StoreClient):
    """In-memory ledger implementing the store interface for local development and tests."""

    def __init__(self, products: Optional[Sequence[Product]] = None) -> None:
        self._products: Dict[str, Product] = {
            product.id: product for product in (SANDBOX_PRODUCTS if products is None else products)
        }
        self._ledger: Dict[str, Entitlement] = {}
        self._updates: "asyncio.Queue[Entitlement]" = asyncio.Queue()
        self._purchase_results: Deque[Tuple[PurchaseStatus, VerificationStatus]] = deque()
        self._purchase_gate: Optional[asyncio.Event] = None
        self.available = True
        self.list_calls = 0
        self.buy_calls: List[str] = []
        self.finished: List[str] = []

    @property
    def ledger(self) -> Tuple[Entitlement, ...]:
        return tuple(self._ledger.values())

    def _ensure_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("Sandbox store is offline")

    async def list_products(self, product_ids: Sequence[str]) -> Sequence[Product]:
        self._ensure_available()
        self.list_calls += 1
        return [self._products[product_id] for product_id in product_ids if product_id in self._products]

    async def current_entitlements(self) -> AsyncIterator[Entitlement]:
        self._ensure_available()
        for entitlement in list(self._ledger.values()):
            yield entitlement

    async def transaction_updates(self) -> AsyncIterator[Entitlement]:
        while True:
            yield await self._updates.get()

    async def buy(self, product: Product) -> PurchaseResult:
        self._ensure_available()
        self.buy_calls.append(product.id)
        if self._purchase_gate is not None:
            await self._purchase_gate.wait()

        status, verification = (
            self._purchase_results.popleft()
            if self._purchase_results
            else (PurchaseStatus.SUCCESS, VerificationStatus.VERIFIED)
        )
        if status != PurchaseStatus.SUCCESS:
            return PurchaseResult(status=status)

        entitlement = self._record(product.id, ProductType.AUTO_RENEWABLE, verification)
        return PurchaseResult(status=status, entitlement=entitlement)

    async def finish(self, entitlement: Entitlement) -> None:
        self.finished.append(entitlement.transaction_id)

    def queue_purchase_result(
        self,
        status: PurchaseStatus,
        *,
        verification: VerificationStatus = VerificationStatus.VERIFIED,
    ) -> None:
        self._purchase_results.append((status, verification))

    def hold_purchases(self) -> None:
        self._purchase_gate = asyncio.Event()

    def release_purchases(self) -> None:
        if self._purchase_gate is not None:
            self._purchase_gate.set()
        self._purchase_gate = None

    def grant(
        self,
        product_id: str,
        *,
        product_type: ProductType = ProductType.AUTO_RENEWABLE,
        verification: VerificationStatus = VerificationStatus.VERIFIED,
        notify: bool = True,
    ) -> Entitlement:
        """Add a transaction to the ledger, optionally pushing it as an update."""

        entitlement = self._record(product_id, product_type, verification)
        if notify:
            self._updates.put_nowait(entitlement)
        return entitlement

    def revoke(self, product_id: str, *, notify: bool = True) -> List[Entitlement]:
        """Drop every ledger entry for ``product_id`` as an expiry or refund would."""

        removed = [entry for entry in self._ledger.values() if entry.product_id == product_id]
        for entry in removed:
            self._ledger.pop(entry.transaction_id, None)
            if notify:
                self._updates.put_nowait(entry)
        return removed

    def _record(
        self,
        product_id: str,
        product_type: ProductType,
        verification: VerificationStatus,
    ) -> Entitlement:
        entitlement = Entitlement(
            product_id=product_id,
            product_type=product_type,
            verification=verification,
            verification_error=None if verification == VerificationStatus.VERIFIED else "signature mismatch",
        )
        self._ledger[entitlement.transaction_id] = entitlement
        return entitlement


@dataclass(frozen=True)
class MonetizationServices:
    """The single catalog, entitlement store and ad gate shared by the app."""

    catalog: ProductCatalog
    store: EntitlementStore
    ad_gate: AdGate

    async def start(self) -> None:
        self.store.start()
        await self.catalog.fetch_products()
        await self.store.reconcile()
        logger.info(
            "Monetization ready products=%s owned=%s",
            len(self.catalog.products),
            sorted(self.store.owned_product_ids),
        )

    async def shutdown(self) -> None:
        await self.store.shutdown()


def create_monetization_services(
    client: Optional[StoreClient] = None,
    *,
    product_fetch_timeout: float = 10.0,
) -> MonetizationServices:
    store_client = client if client is not None else LocalSandboxStoreClient()
    catalog = ProductCatalog(store_client, timeout_seconds=product_fetch_timeout)
    store = EntitlementStore(store_client, catalog)
    return MonetizationServices(catalog=catalog, store=store, ad_gate=AdGate(store))


__all__ = [
    "LocalSandboxStoreClient",
    "MonetizationServices",
    "SANDBOX_PRODUCTS",
    "create_monetization_services",
]
