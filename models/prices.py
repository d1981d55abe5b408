"""Price snapshot models."""

from __future__ import annotations

import math

from pydantic import BaseModel, RootModel


class PriceQuote(BaseModel):
    """Current USD unit price for one asset."""

    usd: float

    @property
    def is_usable(self) -> bool:
        """A quote can back an order only if it is finite and positive."""
        return math.isfinite(self.usd) and self.usd > 0


class PriceSnapshot(RootModel[dict[str, PriceQuote]]):
    """Mapping of asset id -> ``PriceQuote``, replaced wholesale on refresh.

    A missing entry means "price unknown": it values the holding at zero but
    blocks orders against that asset.
    """

    def get(self, asset_id: str) -> PriceQuote | None:
        return self.root.get(asset_id)

    def usd(self, asset_id: str) -> float:
        """Display price for *asset_id*, ``0.0`` when unknown."""
        quote = self.root.get(asset_id)
        return quote.usd if quote is not None else 0.0

    def usable_price(self, asset_id: str) -> float | None:
        """Price for order placement, or ``None`` if there is no usable one."""
        quote = self.root.get(asset_id)
        if quote is None or not quote.is_usable:
            return None
        return quote.usd

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self.root

    def __len__(self) -> int:
        return len(self.root)

    @classmethod
    def from_usd(cls, prices: dict[str, float]) -> PriceSnapshot:
        """Build a snapshot from a plain ``{id: usd}`` mapping."""
        return cls({asset_id: PriceQuote(usd=usd) for asset_id, usd in prices.items()})
