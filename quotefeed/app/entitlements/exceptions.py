"""Errors raised while talking to the external store."""
from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """Base class for failures contained within the entitlement core."""


class VerificationError(StoreError):
    """A transaction failed the store-provided verification."""

    def __init__(self, transaction_id: str, product_id: str, reason: Optional[str] = None) -> None:
        self.transaction_id = transaction_id
        self.product_id = product_id
        self.reason = reason
        message = f"Transaction {transaction_id} for {product_id} failed verification"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StoreUnavailable(StoreError):
    """The external store could not be reached."""
