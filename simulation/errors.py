"""Ledger rejection errors.

Each error carries a ``kind`` tag and a user-facing ``message`` so the caller
can render a precise explanation. None of them is fatal: a rejected operation
leaves the ledger unchanged.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for rejected ledger operations."""

    kind: str = "LedgerError"
    message: str = "The operation could not be completed."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)


class InvalidAmount(LedgerError):
    """Amount is malformed, non-finite or not positive."""

    kind = "InvalidAmount"
    message = "Please enter a valid amount."


class InsufficientFunds(LedgerError):
    """Amount exceeds the cash balance."""

    kind = "InsufficientFunds"
    message = "Error: Insufficient funds in USD Wallet."


class PriceUnavailable(LedgerError):
    """No usable price for the requested asset."""

    kind = "PriceUnavailable"
    message = "Market data unavailable. Please try again."


class UnknownAsset(LedgerError):
    """Asset is not in the tracked set."""

    kind = "UnknownAsset"
    message = "Unsupported asset. Please choose one of your tracked assets."
