"""Portfolio state models."""

from pydantic import BaseModel, Field


class AssetHolding(BaseModel):
    """One tracked asset and the quantity currently held.

    ``id`` is the price-feed identifier (e.g. ``"bitcoin"``); ``symbol`` and
    ``name`` are for display only.
    """

    id: str
    symbol: str
    name: str
    amount: float = Field(default=0.0, ge=0)


class PortfolioSnapshot(BaseModel):
    """Cash and holdings at a point in time.

    Produced by the ledger as a detached copy; mutating it has no effect on
    the ledger.
    """

    cash: float
    holdings: list[AssetHolding]
