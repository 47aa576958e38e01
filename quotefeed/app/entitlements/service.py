"""Entitlement store reconciling owned subscriptions from the store ledger."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, FrozenSet, List, Optional, Protocol, Sequence, Tuple, Union

from .catalog import ProductCatalog
from .exceptions import StoreUnavailable, VerificationError
from .models import (
    Entitlement,
    Product,
    PurchaseOutcome,
    PurchaseOutcomeStatus,
    PurchaseResult,
    PurchaseStatus,
    StoreState,
)

logger = logging.getLogger(__name__)


class StoreClient(Protocol):
    """External, already-authenticated ledger service."""

    async def list_products(self, product_ids: Sequence[str]) -> Sequence[Product]:
        ...

    def current_entitlements(self) -> AsyncIterator[Entitlement]:
        ...

    def transaction_updates(self) -> AsyncIterator[Entitlement]:
        ...

    async def buy(self, product: Product) -> PurchaseResult:
        ...

    async def finish(self, entitlement: Entitlement) -> None:
        ...


def check_verified(entitlement: Entitlement) -> Entitlement:
    """Return the entitlement if it passed verification, raise otherwise."""

    if not entitlement.is_verified:
        raise VerificationError(
            entitlement.transaction_id,
            entitlement.product_id,
            entitlement.verification_error,
        )
    return entitlement


class EntitlementStore:
    """Maintains the reconciled set of product identifiers the user owns.

    The owned set is a materialized view of the ledger: every call to
    :meth:`reconcile` rebuilds it from ``current_entitlements()`` and swaps it in
    as a whole. Updates pushed by the store are read by a listener task and
    handed to a single worker over a queue, so reconciliation passes never
    interleave.
    """

    def __init__(
        self,
        client: StoreClient,
        catalog: ProductCatalog,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._client = client
        self._catalog = catalog
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._owned: FrozenSet[str] = frozenset()
        self._write_lock = asyncio.Lock()
        self._purchase_in_flight = False
        self._updates: "asyncio.Queue[Entitlement]" = asyncio.Queue()
        self._listener_task: Optional[asyncio.Task] = None
        self._worker_task: Optional[asyncio.Task] = None
        self._state = StoreState.IDLE
        self.last_reconciled_at: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.verification_failures = 0

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._listener_task is not None and not self._listener_task.done()

    @property
    def owned_product_ids(self) -> FrozenSet[str]:
        return self._owned

    @property
    def purchased_products(self) -> Tuple[Product, ...]:
        owned = self._owned
        return tuple(product for product in self._catalog.products if product.id in owned)

    def is_owned(self, product: Union[Product, str]) -> bool:
        product_id = product if isinstance(product, str) else product.id
        return product_id in self._owned

    def start(self) -> None:
        """Begin listening for transaction updates."""

        # At most one worker; a dead listener is restarted on its own.
        if self._worker_task is None or self._worker_task.done():
            self._worker_task = asyncio.create_task(self._run_worker(), name="entitlement-reconciler")
        if self.is_listening:
            return
        self._listener_task = asyncio.create_task(self._listen(), name="entitlement-listener")
        self._state = StoreState.LISTENING
        logger.info("Entitlement listener started")

    async def shutdown(self) -> None:
        """Cancel the listener and worker tasks."""

        tasks = [task for task in (self._listener_task, self._worker_task) if task is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._listener_task = None
        self._worker_task = None
        self._state = StoreState.IDLE
        logger.info("Entitlement listener stopped")

    async def reconcile(self) -> FrozenSet[str]:
        """Rebuild the owned set from the ledger's current entitlements."""

        owned, _ = await self._reconcile_pass()
        return owned

    async def _reconcile_pass(self) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        async with self._write_lock:
            self._state = StoreState.RECONCILING
            try:
                return await self._reconcile_locked()
            finally:
                self._state = StoreState.LISTENING if self.is_listening else StoreState.IDLE

    async def purchase(self, product: Product) -> PurchaseOutcome:
        """Buy ``product``; raises :class:`VerificationError` on a bad transaction."""

        if self._purchase_in_flight:
            logger.info("Purchase of %s rejected: another purchase is in flight", product.id)
            return PurchaseOutcome(status=PurchaseOutcomeStatus.IN_PROGRESS, product_id=product.id)

        self._purchase_in_flight = True
        try:
            try:
                result = await self._client.buy(product)
            except StoreUnavailable as exc:
                self.last_error = str(exc)
                logger.warning("Purchase of %s failed: store unavailable (%s)", product.id, exc)
                return PurchaseOutcome(
                    status=PurchaseOutcomeStatus.STORE_UNAVAILABLE,
                    product_id=product.id,
                )

            if result.status == PurchaseStatus.USER_CANCELLED:
                return PurchaseOutcome(status=PurchaseOutcomeStatus.USER_CANCELLED, product_id=product.id)
            if result.status == PurchaseStatus.PENDING:
                return PurchaseOutcome(status=PurchaseOutcomeStatus.PENDING, product_id=product.id)
            if result.entitlement is None:
                logger.warning("Store reported success without a transaction for %s", product.id)
                return PurchaseOutcome(
                    status=PurchaseOutcomeStatus.STORE_UNAVAILABLE,
                    product_id=product.id,
                )

            try:
                entitlement = check_verified(result.entitlement)
            except VerificationError as exc:
                self._record_verification_failure(exc)
                raise

            _, finished = await self._reconcile_pass()
            if entitlement.transaction_id not in finished:
                await self._finish(entitlement)
            logger.info("Purchased %s transaction=%s", product.id, entitlement.transaction_id)
            return PurchaseOutcome(
                status=PurchaseOutcomeStatus.PURCHASED,
                product_id=product.id,
                entitlement=entitlement,
            )
        finally:
            self._purchase_in_flight = False

    async def _reconcile_locked(self) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        """Return the owned set and the transaction ids finished by this pass."""

        owned: set[str] = set()
        processed: List[Entitlement] = []
        try:
            async for result in self._client.current_entitlements():
                try:
                    entitlement = check_verified(result)
                except VerificationError as exc:
                    self._record_verification_failure(exc)
                    continue

                if entitlement.is_subscription and self._catalog.knows(entitlement.product_id):
                    owned.add(entitlement.product_id)
                processed.append(entitlement)
        except Exception as exc:
            self.last_error = str(exc) or exc.__class__.__name__
            logger.warning("Reconciliation aborted, keeping previous entitlements: %s", self.last_error)
            return self._owned, frozenset()

        previous = self._owned
        self._owned = frozenset(owned)
        self.last_reconciled_at = self._clock()
        self.last_error = None
        if previous != self._owned:
            logger.info(
                "Entitlements changed added=%s removed=%s",
                sorted(self._owned - previous),
                sorted(previous - self._owned),
            )

        for entitlement in processed:
            await self._finish(entitlement)
        return self._owned, frozenset(entitlement.transaction_id for entitlement in processed)

    async def _finish(self, entitlement: Entitlement) -> None:
        try:
            await self._client.finish(entitlement)
        except Exception:
            logger.exception("Failed to finish transaction %s", entitlement.transaction_id)

    def _record_verification_failure(self, exc: VerificationError) -> None:
        self.verification_failures += 1
        logger.warning("Transaction failed verification: %s", exc)

    async def _listen(self) -> None:
        try:
            async for update in self._client.transaction_updates():
                self._updates.put_nowait(update)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Transaction update stream terminated")

    async def _run_worker(self) -> None:
        while True:
            update = await self._updates.get()
            batch = [update]
            while True:
                try:
                    batch.append(self._updates.get_nowait())
                except asyncio.QueueEmpty:
                    break
            try:
                await self._process_updates(batch)
            except Exception:
                logger.exception("Failed to process transaction updates")
            finally:
                for _ in batch:
                    self._updates.task_done()

    async def _process_updates(self, batch: Sequence[Entitlement]) -> None:
        verified: List[Entitlement] = []
        for update in batch:
            try:
                verified.append(check_verified(update))
            except VerificationError as exc:
                self._record_verification_failure(exc)
        if not verified:
            return
        _, finished = await self._reconcile_pass()
        for entitlement in verified:
            if entitlement.transaction_id not in finished:
                await self._finish(entitlement)


__all__ = ["EntitlementStore", "StoreClient", "check_verified"]
