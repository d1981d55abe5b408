"""
Tests for the ledger and valuation engine.

Tests verify:
  1. Seed state comes from LedgerConfig
  2. Deposits (default top-up, explicit amounts, invalid amounts)
  3. Buys: success path and each rejection kind, in check order
  4. Rejections leave state and history untouched
  5. Net worth with full, partial and absent snapshots
  6. History ordering and read idempotence
  7. Cash never goes negative across operation sequences
  8. Concurrent writers are serialized without gaps in the sequence
"""

import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from models.config import LedgerConfig
from models.portfolio import AssetHolding
from models.prices import PriceSnapshot
from models.transaction import CASH_ASSET_ID, TransactionType
from simulation.errors import (
    InsufficientFunds,
    InvalidAmount,
    LedgerError,
    PriceUnavailable,
    UnknownAsset,
)
from simulation.ledger import Ledger


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def ledger() -> Ledger:
    """Default seed: $5000 cash, 0.5 BTC, 2 ETH, 10 SOL."""
    return Ledger(LedgerConfig())


@pytest.fixture
def snapshot() -> PriceSnapshot:
    return PriceSnapshot.from_usd(
        {"bitcoin": 64230.50, "ethereum": 3450.20, "solana": 148.10}
    )


@pytest.fixture
def btc_only_ledger() -> Ledger:
    return Ledger(
        LedgerConfig(
            initial_cash=5000.0,
            holdings=[AssetHolding(id="bitcoin", symbol="BTC", name="Bitcoin", amount=0.5)],
        )
    )


def _state(ledger: Ledger):
    return ledger.get_portfolio(), ledger.list_history()


# =============================================================================
# 1. SEED STATE
# =============================================================================


class TestSeedState:
    def test_default_seed(self, ledger: Ledger):
        portfolio = ledger.get_portfolio()
        assert portfolio.cash == 5000.0
        assert [(h.id, h.amount) for h in portfolio.holdings] == [
            ("bitcoin", 0.5),
            ("ethereum", 2.0),
            ("solana", 10.0),
        ]
        assert ledger.list_history() == []

    def test_portfolio_snapshot_is_detached(self, ledger: Ledger):
        portfolio = ledger.get_portfolio()
        portfolio.holdings[0].amount = 99.0
        portfolio.cash = 0.0
        assert ledger.get_holding("bitcoin").amount == 0.5
        assert ledger.cash_balance == 5000.0

    def test_duplicate_seed_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate holding id"):
            LedgerConfig(
                holdings=[
                    AssetHolding(id="bitcoin", symbol="BTC", name="Bitcoin"),
                    AssetHolding(id="bitcoin", symbol="BTC", name="Bitcoin"),
                ]
            )

    def test_negative_initial_cash_rejected(self):
        with pytest.raises(ValueError):
            LedgerConfig(initial_cash=-1.0)


# =============================================================================
# 2. DEPOSIT
# =============================================================================


class TestDeposit:
    def test_deposit_scenario(self, ledger: Ledger):
        record = ledger.deposit(1000)
        assert ledger.cash_balance == 6000.0
        history = ledger.list_history()
        assert len(history) == 1
        assert history[0] == record
        assert record.type == TransactionType.DEPOSIT
        assert record.asset_id == CASH_ASSET_ID == "USD"
        assert record.amount == 1000.0
        assert record.status == "Completed"
        assert record.currency == "USD"

    def test_default_top_up_amount(self):
        ledger = Ledger(LedgerConfig(top_up_amount=250.0))
        ledger.deposit()
        assert ledger.cash_balance == 5250.0

    @pytest.mark.parametrize("amount", [0, -5, "abc", float("nan"), float("inf"), True])
    def test_invalid_deposit_rejected(self, amount):
        ledger = Ledger(LedgerConfig())
        with pytest.raises(InvalidAmount):
            ledger.deposit(amount)
        assert ledger.cash_balance == 5000.0
        assert ledger.list_history() == []

    def test_record_uses_clock(self):
        fixed = datetime(2025, 3, 15, 10, 0, tzinfo=timezone.utc)
        ledger = Ledger(LedgerConfig(), clock=lambda: fixed)
        record = ledger.deposit(10)
        assert record.date == "2025-03-15T10:00:00+00:00"

    def test_records_are_immutable(self, ledger: Ledger):
        record = ledger.deposit(10)
        with pytest.raises(ValidationError):
            record.amount = 20.0


# =============================================================================
# 3. BUY
# =============================================================================


class TestBuy:
    def test_buy_scenario_btc(self, btc_only_ledger: Ledger):
        record = btc_only_ledger.buy("bitcoin", 100, {"bitcoin": {"usd": 64230.50}})
        assert btc_only_ledger.cash_balance == pytest.approx(4900.00)
        assert btc_only_ledger.get_holding("bitcoin").amount == pytest.approx(
            0.5 + 100 / 64230.50
        )
        assert btc_only_ledger.get_holding("bitcoin").amount == pytest.approx(0.5015569, abs=1e-7)
        history = btc_only_ledger.list_history()
        assert len(history) == 1
        assert record.type == TransactionType.BUY
        assert record.asset_id == "bitcoin"
        assert record.amount == 100.0
        assert record.price == 64230.50
        assert record.quantity == pytest.approx(100 / 64230.50)

    def test_buy_accepts_numeric_string(self, ledger: Ledger, snapshot: PriceSnapshot):
        ledger.buy("ethereum", " 345.02 ", snapshot)
        assert ledger.cash_balance == pytest.approx(4654.98)
        assert ledger.get_holding("ethereum").amount == pytest.approx(2.1)

    def test_buy_entire_balance(self, ledger: Ledger, snapshot: PriceSnapshot):
        ledger.buy("solana", 5000, snapshot)
        assert ledger.cash_balance == 0.0

    def test_insufficient_funds(self, ledger: Ledger, snapshot: PriceSnapshot):
        before = _state(ledger)
        with pytest.raises(InsufficientFunds):
            ledger.buy("ethereum", 10000, snapshot)
        assert _state(ledger) == before

    def test_no_snapshot_is_price_unavailable(self, ledger: Ledger):
        before = _state(ledger)
        with pytest.raises(PriceUnavailable):
            ledger.buy("ethereum", 100, None)
        assert _state(ledger) == before

    def test_missing_price_entry_is_price_unavailable(self, ledger: Ledger):
        with pytest.raises(PriceUnavailable):
            ledger.buy("solana", 100, PriceSnapshot.from_usd({"bitcoin": 1.0}))

    @pytest.mark.parametrize("price", [0.0, -3.0, float("nan"), float("inf")])
    def test_unusable_price_is_price_unavailable(self, ledger: Ledger, price: float):
        with pytest.raises(PriceUnavailable):
            ledger.buy("solana", 100, PriceSnapshot.from_usd({"solana": price}))
        assert ledger.get_holding("solana").amount == 10.0

    def test_negative_amount(self, ledger: Ledger, snapshot: PriceSnapshot):
        before = _state(ledger)
        with pytest.raises(InvalidAmount):
            ledger.buy("bitcoin", -5, snapshot)
        assert _state(ledger) == before

    @pytest.mark.parametrize("amount", [0, "", "12abc", None, float("nan"), float("-inf")])
    def test_malformed_amounts(self, ledger: Ledger, snapshot: PriceSnapshot, amount):
        with pytest.raises(InvalidAmount):
            ledger.buy("bitcoin", amount, snapshot)

    def test_unknown_asset(self, ledger: Ledger, snapshot: PriceSnapshot):
        prices = PriceSnapshot.from_usd({**{k: v.usd for k, v in snapshot.root.items()}, "dogecoin": 0.1})
        before = _state(ledger)
        with pytest.raises(UnknownAsset):
            ledger.buy("dogecoin", 10, prices)
        assert _state(ledger) == before
        assert ledger.get_holding("dogecoin") is None

    def test_check_order_invalid_amount_first(self, ledger: Ledger):
        # Every check would fail; the amount check wins.
        with pytest.raises(InvalidAmount):
            ledger.buy("dogecoin", -1, None)

    def test_check_order_funds_before_price(self, ledger: Ledger):
        with pytest.raises(InsufficientFunds):
            ledger.buy("bitcoin", 10000, None)

    def test_check_order_unknown_asset_before_price(self, ledger: Ledger):
        with pytest.raises(UnknownAsset):
            ledger.buy("dogecoin", 10, None)

    @pytest.mark.parametrize(
        "entry", [{"usd": None}, 64230.5, {"eur": 1.0}, "cheap"], ids=["null", "bare", "eur", "str"]
    )
    def test_malformed_mapping_entry_is_price_unavailable(self, ledger: Ledger, entry):
        before = _state(ledger)
        with pytest.raises(PriceUnavailable):
            ledger.buy("bitcoin", 100, {"bitcoin": entry})
        assert _state(ledger) == before

    def test_malformed_mapping_keeps_check_order(self, ledger: Ledger):
        with pytest.raises(InvalidAmount):
            ledger.buy("bitcoin", -5, {"bitcoin": 64230.5})
        with pytest.raises(InsufficientFunds):
            ledger.buy("bitcoin", 1e9, {"bitcoin": {"usd": None}})
        with pytest.raises(UnknownAsset):
            ledger.buy("dogecoin", 10, {"dogecoin": "n/a"})

    def test_only_the_bought_asset_entry_is_read(self, ledger: Ledger):
        record = ledger.buy("solana", 150, {"solana": {"usd": 150.0}, "bitcoin": None})
        assert record.quantity == pytest.approx(1.0)

    def test_rejections_are_logged(self, ledger: Ledger, caplog):
        with caplog.at_level(logging.INFO, logger="simulation.ledger"):
            with pytest.raises(PriceUnavailable):
                ledger.buy("bitcoin", 100, {"bitcoin": {"usd": None}})
        assert "PriceUnavailable" in caplog.text

    def test_errors_carry_kind_and_message(self, ledger: Ledger, snapshot: PriceSnapshot):
        with pytest.raises(LedgerError) as excinfo:
            ledger.buy("ethereum", 10000, snapshot)
        assert excinfo.value.kind == "InsufficientFunds"
        assert excinfo.value.message == "Error: Insufficient funds in USD Wallet."


# =============================================================================
# 4. VALUATION
# =============================================================================


class TestValuation:
    def test_net_worth_without_snapshot_is_cash(self, ledger: Ledger):
        assert ledger.compute_net_worth(None) == 5000.0
        assert ledger.compute_net_worth() == 5000.0

    def test_net_worth_with_snapshot(self, ledger: Ledger, snapshot: PriceSnapshot):
        expected = 5000.0 + 0.5 * 64230.50 + 2.0 * 3450.20 + 10.0 * 148.10
        assert ledger.compute_net_worth(snapshot) == pytest.approx(expected)

    def test_missing_price_counts_as_zero(self, ledger: Ledger):
        prices = PriceSnapshot.from_usd({"bitcoin": 60000.0})
        assert ledger.compute_net_worth(prices) == pytest.approx(5000.0 + 30000.0)
        assert ledger.crypto_value(prices) == pytest.approx(30000.0)

    def test_valuate_marks_unknown_prices(self, ledger: Ledger):
        valued = ledger.valuate(PriceSnapshot.from_usd({"ethereum": 3000.0}))
        by_id = {v.id: v for v in valued}
        assert by_id["ethereum"].current_price == 3000.0
        assert by_id["ethereum"].value == pytest.approx(6000.0)
        assert by_id["bitcoin"].current_price is None
        assert by_id["bitcoin"].value == 0.0

    def test_malformed_mapping_entries_value_as_zero(self, ledger: Ledger):
        prices = {"bitcoin": {"usd": 60000.0}, "ethereum": {"usd": None}, "solana": 148.1}
        assert ledger.compute_net_worth(prices) == pytest.approx(5000.0 + 30000.0)
        by_id = {v.id: v for v in ledger.valuate(prices)}
        assert by_id["ethereum"].current_price is None
        assert by_id["solana"].value == 0.0

    def test_buy_preserves_net_worth_at_fill_price(self, ledger: Ledger, snapshot: PriceSnapshot):
        before = ledger.compute_net_worth(snapshot)
        ledger.buy("ethereum", 1234.56, snapshot)
        assert ledger.compute_net_worth(snapshot) == pytest.approx(before)

    def test_reads_are_idempotent(self, ledger: Ledger, snapshot: PriceSnapshot):
        ledger.deposit(10)
        ledger.buy("bitcoin", 100, snapshot)
        assert ledger.compute_net_worth(snapshot) == ledger.compute_net_worth(snapshot)
        assert ledger.list_history() == ledger.list_history()


# =============================================================================
# 5. HISTORY & INVARIANTS
# =============================================================================


class TestHistory:
    def test_newest_first(self, ledger: Ledger, snapshot: PriceSnapshot):
        first = ledger.deposit(100)
        second = ledger.buy("bitcoin", 50, snapshot)
        third = ledger.deposit(25)
        history = ledger.list_history()
        assert history == [third, second, first]
        assert [r.sequence for r in history] == [3, 2, 1]

    def test_rejections_do_not_record(self, ledger: Ledger, snapshot: PriceSnapshot):
        ledger.deposit(100)
        with pytest.raises(InsufficientFunds):
            ledger.buy("bitcoin", 1e9, snapshot)
        assert len(ledger.list_history()) == 1

    def test_history_copy_is_detached(self, ledger: Ledger):
        ledger.deposit(100)
        ledger.list_history().clear()
        assert len(ledger.list_history()) == 1

    def test_concurrent_writers_are_serialized(self, snapshot: PriceSnapshot):
        ledger = Ledger(LedgerConfig(initial_cash=0.0))
        deposits, buys = 200, 100

        def work(i: int) -> None:
            ledger.deposit(10)
            if i < buys:
                ledger.buy("solana", 5, snapshot)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(deposits)))

        history = ledger.list_history()
        assert len(history) == deposits + buys
        assert [r.sequence for r in history] == list(range(deposits + buys, 0, -1))
        assert ledger.cash_balance == pytest.approx(deposits * 10 - buys * 5)
        assert ledger.get_holding("solana").amount == pytest.approx(10.0 + buys * 5 / 148.10)

    def test_logged_balance_matches_commit(self, ledger: Ledger, caplog):
        with caplog.at_level(logging.INFO, logger="simulation.ledger"):
            ledger.deposit(250)
        assert "cash balance now $5250.00" in caplog.text

    def test_random_sequences_keep_invariants(self, snapshot: PriceSnapshot):
        rng = random.Random(1234)
        ledger = Ledger(LedgerConfig())
        successes = 0
        for _ in range(300):
            cash_before = ledger.cash_balance
            if rng.random() < 0.3:
                try:
                    ledger.deposit(rng.uniform(-100, 500))
                    successes += 1
                except InvalidAmount:
                    assert ledger.cash_balance == cash_before
            else:
                asset = rng.choice(["bitcoin", "ethereum", "solana", "dogecoin"])
                amount = rng.uniform(-100, 3000)
                held = ledger.get_holding(asset)
                try:
                    ledger.buy(asset, amount, snapshot)
                except LedgerError:
                    assert ledger.cash_balance == cash_before
                else:
                    successes += 1
                    price = snapshot.usable_price(asset)
                    assert ledger.cash_balance == pytest.approx(cash_before - amount)
                    assert ledger.get_holding(asset).amount == pytest.approx(
                        held.amount + amount / price
                    )
            assert ledger.cash_balance >= 0
            assert math.isfinite(ledger.cash_balance)
        assert len(ledger.list_history()) == successes
