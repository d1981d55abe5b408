"""Substitute data used when an endpoint is unreachable."""

from __future__ import annotations

import random

from models.config import FallbackConfig
from models.prices import PriceSnapshot

MOCK_SUGGESTIONS: tuple[str, ...] = (
    "Analysis (Offline Mode): Your portfolio shows a strong allocation in growth assets. "
    "Given current market volatility, consider dollar-cost averaging into Bitcoin to "
    "stabilize your long-term hold.",
    "Analysis (Offline Mode): Great entry points detected for Ethereum. Your current "
    "holdings are well-balanced, but increasing ETH allocation could capture upcoming "
    "upgrade value.",
    "Analysis (Offline Mode): Caution is advised. The market is showing signs of "
    "overheating. Consider setting stop-loss orders on your Solana positions to protect "
    "gains.",
)

OFFLINE_CHAT_REPLY = (
    "I'm currently offline and can't access the advanced AI features. "
    "Please check your internet connection or try again later."
)


def mock_prices(fallback: FallbackConfig, rng: random.Random) -> PriceSnapshot:
    """Each baseline price jittered uniformly within +/- its jitter."""
    return PriceSnapshot.from_usd(
        {
            asset_id: base.baseline + rng.uniform(-base.jitter, base.jitter)
            for asset_id, base in fallback.prices.items()
        }
    )


def mock_suggestion(rng: random.Random) -> str:
    return rng.choice(MOCK_SUGGESTIONS)
