"""In-process ledger: cash wallet, holdings and transaction history.

The ledger validates and applies deposits and buys with all-or-nothing
semantics and keeps an append-only history (newest first). Valuation against a
price snapshot is read-only and never touches ledger state.
"""

from __future__ import annotations

import itertools
import logging
import math
import threading
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Union

from pydantic import ValidationError

from models.config import LedgerConfig
from models.context import HoldingValuation
from models.portfolio import AssetHolding, PortfolioSnapshot
from models.prices import PriceQuote, PriceSnapshot
from models.transaction import CASH_ASSET_ID, TransactionRecord, TransactionType
from simulation import valuation
from simulation.errors import (
    InsufficientFunds,
    InvalidAmount,
    LedgerError,
    PriceUnavailable,
    UnknownAsset,
)

logger = logging.getLogger(__name__)

PriceInput = Union[PriceSnapshot, Mapping[str, Any], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Ledger:
    """Stateful ledger that validates, applies, and records mutations for one session.

    Instantiate one ``Ledger`` per session from a ``LedgerConfig``. The ledger
    exclusively owns the cash balance, the holdings and the history; callers
    only ever receive copies.
    """

    def __init__(
        self,
        config: LedgerConfig | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._config = config or LedgerConfig()
        self._clock = clock
        self._cash: float = self._config.initial_cash
        self._holdings: dict[str, AssetHolding] = {
            h.id: h.model_copy() for h in self._config.holdings
        }
        self._history: list[TransactionRecord] = []
        self._sequence = itertools.count(1)
        # Single writer: mutations are serialized so history order matches
        # submission order even if a caller adds threads.
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def cash_balance(self) -> float:
        return self._cash

    @property
    def asset_ids(self) -> list[str]:
        return list(self._holdings)

    def get_holding(self, asset_id: str) -> AssetHolding | None:
        holding = self._holdings.get(asset_id)
        return holding.model_copy() if holding is not None else None

    def get_portfolio(self) -> PortfolioSnapshot:
        """Return a snapshot of the current cash and holdings."""
        with self._lock:
            return PortfolioSnapshot(
                cash=self._cash,
                holdings=[h.model_copy() for h in self._holdings.values()],
            )

    def list_history(self) -> list[TransactionRecord]:
        """Return the transaction history, most recent first."""
        with self._lock:
            return list(self._history)

    def deposit(self, amount: Any = None) -> TransactionRecord:
        """Add *amount* (default: the configured top-up) to the cash balance.

        Raises ``InvalidAmount`` unless *amount* is a finite number above zero.
        """
        try:
            value = _parse_amount(self._config.top_up_amount if amount is None else amount)
        except InvalidAmount as exc:
            logger.info("Deposit rejected (%s): %s", exc.kind, exc)
            raise
        with self._lock:
            record = self._new_record(TransactionType.DEPOSIT, CASH_ASSET_ID, value)
            self._cash += value
            self._history.insert(0, record)
            balance = self._cash

        logger.info("Deposited $%.2f; cash balance now $%.2f.", value, balance)
        return record

    def buy(self, asset_id: str, amount_usd: Any, prices: PriceInput) -> TransactionRecord:
        """Spend *amount_usd* of cash on *asset_id* at the snapshot price.

        Checks run in order against one consistent read of the cash balance
        and the snapshot; the first failure is raised and nothing changes:

        1. ``InvalidAmount`` -- not a finite number above zero.
        2. ``InsufficientFunds`` -- more than the cash balance.
        3. ``UnknownAsset`` -- not a tracked holding.
        4. ``PriceUnavailable`` -- no usable price for the asset.
        """
        with self._lock:
            try:
                amount = _parse_amount(amount_usd)
                if amount > self._cash:
                    raise InsufficientFunds(
                        f"Cannot spend ${amount:.2f}; available ${self._cash:.2f}."
                    )
                holding = self._holdings.get(asset_id)
                if holding is None:
                    raise UnknownAsset(
                        f"Asset '{asset_id}' is not tracked. "
                        f"Allowed: {', '.join(self._holdings)}."
                    )
                price = _usable_price(prices, asset_id)
                if price is None:
                    raise PriceUnavailable(f"No usable price for '{asset_id}'.")
            except LedgerError as exc:
                logger.info("Buy of %r rejected (%s): %s", asset_id, exc.kind, exc)
                raise

            quantity = amount / price
            record = self._new_record(
                TransactionType.BUY, asset_id, amount, price=price, quantity=quantity
            )

            # Commit.
            self._cash -= amount
            self._holdings[asset_id] = holding.model_copy(
                update={"amount": holding.amount + quantity}
            )
            self._history.insert(0, record)
            balance = self._cash

        logger.info(
            "Bought %.8f %s for $%.2f at $%.2f; cash balance now $%.2f.",
            quantity,
            holding.symbol,
            amount,
            price,
            balance,
        )
        return record

    # ------------------------------------------------------------------
    # Valuation (read-only)
    # ------------------------------------------------------------------

    def crypto_value(self, prices: PriceInput = None) -> float:
        portfolio = self.get_portfolio()
        return valuation.crypto_value(portfolio.holdings, _coerce_snapshot(prices))

    def compute_net_worth(self, prices: PriceInput = None) -> float:
        """Cash plus holdings valued at *prices*; missing prices count as zero.

        With no snapshot at all the result is the cash balance alone.
        """
        return valuation.net_worth(self.get_portfolio(), _coerce_snapshot(prices))

    def valuate(self, prices: PriceInput = None) -> list[HoldingValuation]:
        portfolio = self.get_portfolio()
        return valuation.valuate_holdings(portfolio.holdings, _coerce_snapshot(prices))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _new_record(
        self,
        kind: TransactionType,
        asset_id: str,
        amount: float,
        price: float | None = None,
        quantity: float | None = None,
    ) -> TransactionRecord:
        return TransactionRecord(
            id=uuid.uuid4().hex[:12],
            sequence=next(self._sequence),
            type=kind,
            asset_id=asset_id,
            amount=amount,
            date=self._clock().isoformat(),
            price=price,
            quantity=quantity,
        )


def _parse_amount(value: Any) -> float:
    """Coerce *value* (number or numeric string) to a finite positive float."""
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be a number, got {value!r}.")
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmount(f"Amount must be a number, got {value!r}.") from None
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmount(f"Amount must be positive, got {value!r}.")
    return amount


def _parse_quote(asset_id: str, raw: Any) -> PriceQuote | None:
    if isinstance(raw, PriceQuote):
        return raw
    try:
        return PriceQuote.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring malformed price entry for %r: %r", asset_id, raw)
        return None


def _usable_price(prices: PriceInput, asset_id: str) -> float | None:
    """Order price for *asset_id* alone; other entries are never inspected."""
    if prices is None:
        return None
    if isinstance(prices, PriceSnapshot):
        return prices.usable_price(asset_id)
    if asset_id not in prices:
        return None
    quote = _parse_quote(asset_id, prices[asset_id])
    if quote is None or not quote.is_usable:
        return None
    return quote.usd


def _coerce_snapshot(prices: PriceInput) -> PriceSnapshot | None:
    """Snapshot for valuation; malformed entries are dropped and value as zero."""
    if prices is None or isinstance(prices, PriceSnapshot):
        return prices
    quotes = {}
    for asset_id, raw in prices.items():
        quote = _parse_quote(asset_id, raw)
        if quote is not None:
            quotes[asset_id] = quote
    return PriceSnapshot(quotes)
