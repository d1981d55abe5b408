"""Transaction log models."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

# Asset id recorded for pure-cash movements.
CASH_ASSET_ID = "USD"


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    BUY = "BUY"


class TransactionRecord(BaseModel):
    """Immutable record of one completed ledger mutation.

    ``amount`` is always the USD amount involved. ``price`` and ``quantity``
    are only set for buys (fill price and units acquired). ``sequence`` is a
    per-ledger monotonic counter used to order records that share a timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    sequence: int
    type: TransactionType
    asset_id: str
    amount: float
    currency: Literal["USD"] = "USD"
    date: str  # ISO-8601, UTC
    status: str = "Completed"
    price: float | None = None
    quantity: float | None = None


class TransactionStatus(BaseModel):
    """User-facing outcome of the last buy/deposit intent."""

    type: Literal["success", "error"]
    message: str
