"""Valuation and assistant-context models.

These are the payloads handed to the advisory and chat endpoints. Field names
on the wire are camelCase (``currentPrice``, ``totalValue``, ``cashBalance``)
so every model here dumps ``by_alias``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from models.portfolio import AssetHolding
from models.prices import PriceSnapshot


class HoldingValuation(AssetHolding):
    """A holding with its snapshot-derived price and value.

    ``current_price`` is ``None`` when the snapshot has no entry for the asset;
    ``value`` is then ``0.0``.
    """

    model_config = ConfigDict(populate_by_name=True)

    current_price: float | None = Field(default=None, alias="currentPrice")
    value: float = 0.0


class ChatHolding(AssetHolding):
    """A holding as seen by the chat assistant."""

    model_config = ConfigDict(populate_by_name=True)

    current_value: float = Field(default=0.0, alias="currentValue")


class AdvisoryRequest(BaseModel):
    """Body of a suggestion request: valued holdings plus total net worth."""

    model_config = ConfigDict(populate_by_name=True)

    portfolio: list[HoldingValuation]
    total_value: float = Field(alias="totalValue")

    def to_payload(self) -> dict[str, Any]:
        # Unknown prices are left out of the holding rather than sent as null.
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChatContext(BaseModel):
    """Ledger state and raw prices bundled with a chat utterance."""

    model_config = ConfigDict(populate_by_name=True)

    portfolio: list[ChatHolding]
    cash_balance: float = Field(alias="cashBalance")
    prices: PriceSnapshot | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ChatRequest(BaseModel):
    """Body of a chat request."""

    message: str
    context: ChatContext

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "context": self.context.to_payload()}
