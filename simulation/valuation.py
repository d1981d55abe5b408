"""Snapshot valuation and assistant-context packaging.

Everything here is a pure function of a ``PortfolioSnapshot`` and an optional
``PriceSnapshot``. A ``None`` snapshot (no refresh has completed yet) values
every holding at zero.
"""

from __future__ import annotations

from models.context import AdvisoryRequest, ChatContext, ChatHolding, HoldingValuation
from models.portfolio import AssetHolding, PortfolioSnapshot
from models.prices import PriceSnapshot


def holding_value(holding: AssetHolding, prices: PriceSnapshot | None) -> float:
    """Quantity times snapshot price, treating a missing price as zero."""
    if prices is None:
        return 0.0
    return holding.amount * prices.usd(holding.id)


def crypto_value(holdings: list[AssetHolding], prices: PriceSnapshot | None) -> float:
    return sum((holding_value(h, prices) for h in holdings), 0.0)


def net_worth(portfolio: PortfolioSnapshot, prices: PriceSnapshot | None) -> float:
    """Cash plus the snapshot-valued sum of all holdings."""
    return portfolio.cash + crypto_value(portfolio.holdings, prices)


def valuate_holdings(
    holdings: list[AssetHolding],
    prices: PriceSnapshot | None,
) -> list[HoldingValuation]:
    valued = []
    for holding in holdings:
        quote = prices.get(holding.id) if prices is not None else None
        valued.append(
            HoldingValuation(
                **holding.model_dump(),
                current_price=quote.usd if quote is not None else None,
                value=holding_value(holding, prices),
            )
        )
    return valued


def build_advisory_request(
    portfolio: PortfolioSnapshot,
    prices: PriceSnapshot | None,
) -> AdvisoryRequest:
    return AdvisoryRequest(
        portfolio=valuate_holdings(portfolio.holdings, prices),
        total_value=net_worth(portfolio, prices),
    )


def build_chat_context(
    portfolio: PortfolioSnapshot,
    prices: PriceSnapshot | None,
) -> ChatContext:
    return ChatContext(
        portfolio=[
            ChatHolding(**h.model_dump(), current_value=holding_value(h, prices))
            for h in portfolio.holdings
        ],
        cash_balance=portfolio.cash,
        prices=prices,
    )
