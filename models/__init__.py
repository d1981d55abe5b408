"""Data models for the simulated crypto-portfolio tracker.

The ledger, the endpoint clients and the assistant backend all import from
models.
"""

from models.config import (
    AppConfig,
    AssistantConfig,
    EndpointConfig,
    FallbackConfig,
    FallbackPrice,
    LedgerConfig,
)
from models.context import AdvisoryRequest, ChatContext, ChatHolding, ChatRequest, HoldingValuation
from models.portfolio import AssetHolding, PortfolioSnapshot
from models.prices import PriceQuote, PriceSnapshot
from models.results import FetchResult
from models.session import ChatTurn, SessionLabel
from models.transaction import CASH_ASSET_ID, TransactionRecord, TransactionStatus, TransactionType

__all__ = [
    # config
    "AppConfig",
    "AssistantConfig",
    "EndpointConfig",
    "FallbackConfig",
    "FallbackPrice",
    "LedgerConfig",
    # context
    "AdvisoryRequest",
    "ChatContext",
    "ChatHolding",
    "ChatRequest",
    "HoldingValuation",
    # portfolio
    "AssetHolding",
    "PortfolioSnapshot",
    # prices
    "PriceQuote",
    "PriceSnapshot",
    # results
    "FetchResult",
    # session
    "ChatTurn",
    "SessionLabel",
    # transaction
    "CASH_ASSET_ID",
    "TransactionRecord",
    "TransactionStatus",
    "TransactionType",
]
