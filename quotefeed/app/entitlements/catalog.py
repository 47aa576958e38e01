"""Static product definitions and the priced product catalog."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .models import Product, ProductKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductDefinition:
    """Describes a purchasable subscription SKU."""

    product_id: str
    kind: ProductKind
    display_name: str


MONTHLY_PRODUCT_ID = "com.appsved.geeta.and.quotes.monthly"
YEARLY_PRODUCT_ID = "com.appsved.geeta.and.quotes.yearly"

PRODUCT_DEFINITIONS: Dict[str, ProductDefinition] = {
    MONTHLY_PRODUCT_ID: ProductDefinition(
        product_id=MONTHLY_PRODUCT_ID,
        kind=ProductKind.SUBSCRIPTION_MONTHLY,
        display_name="Monthly Premium",
    ),
    YEARLY_PRODUCT_ID: ProductDefinition(
        product_id=YEARLY_PRODUCT_ID,
        kind=ProductKind.SUBSCRIPTION_YEARLY,
        display_name="Yearly Premium",
    ),
}

PRODUCT_IDS: Tuple[str, ...] = (MONTHLY_PRODUCT_ID, YEARLY_PRODUCT_ID)


def get_product_definition(product_id: str) -> ProductDefinition:
    """Return a product definition, raising if unsupported."""

    try:
        return PRODUCT_DEFINITIONS[product_id]
    except KeyError as exc:
        raise KeyError(f"Unknown product id: {product_id}") from exc


class ProductCatalog:
    """Resolves the hardcoded product identifiers into priced products.

    The catalog keeps the last successful fetch. A failed or timed out fetch
    leaves it untouched and is recorded in :attr:`last_error`.
    """

    def __init__(
        self,
        client,
        *,
        product_ids: Sequence[str] = PRODUCT_IDS,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._product_ids: Tuple[str, ...] = tuple(product_ids)
        self._timeout_seconds = max(timeout_seconds, 0.1)
        self._products: Tuple[Product, ...] = ()
        self.last_error: Optional[str] = None

    @property
    def product_ids(self) -> Tuple[str, ...]:
        return self._product_ids

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products

    def knows(self, product_id: str) -> bool:
        return product_id in self._product_ids

    def get(self, product_id: str) -> Optional[Product]:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    async def fetch_products(self) -> Tuple[Product, ...]:
        """Query the store once and return products by descending price."""

        try:
            fetched = await asyncio.wait_for(
                self._client.list_products(self._product_ids),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.last_error = f"Product request timed out after {self._timeout_seconds}s"
            logger.warning("Failed product request from store: %s", self.last_error)
            return self._products
        except Exception as exc:
            self.last_error = str(exc) or exc.__class__.__name__
            logger.exception("Failed product request from store")
            return self._products

        known = [product for product in fetched if product.id in self._product_ids]
        self._products = tuple(sorted(known, key=lambda product: product.price, reverse=True))
        self.last_error = None
        logger.info("Fetched %s products from store", len(self._products))
        return self._products
