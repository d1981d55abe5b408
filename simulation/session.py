"""Session orchestrator: dispatches user intents to the ledger and the endpoint clients.

Lifecycle:
    1. ``login`` mints a ``SessionLabel``; ``PortfolioSession.from_config``
       builds the ledger and the three clients.
    2. ``refresh_prices`` replaces the price snapshot wholesale.
    3. ``top_up`` / ``invest`` apply ledger mutations and record a
       ``TransactionStatus`` for display.
    4. ``generate_suggestion`` / ``send_chat`` package the ledger state with
       the current snapshot and hand it to the assistant endpoints.
    5. ``aclose`` releases the HTTP client.

Each network-bound intent is non-reentrant: a second call while one of the
same kind is in flight returns ``None`` without issuing a request.
"""

from __future__ import annotations

import logging
import random
from typing import Any

import httpx

from api_client.advisory import AdvisoryClient
from api_client.base import EndpointClient
from api_client.chat import ChatClient
from api_client.prices import PriceFeedClient
from models.config import AppConfig
from models.context import HoldingValuation
from models.prices import PriceSnapshot
from models.results import FetchResult
from models.session import ChatTurn, SessionLabel
from models.transaction import TransactionStatus
from simulation.errors import LedgerError
from simulation.ledger import Ledger
from simulation.valuation import build_advisory_request, build_chat_context

logger = logging.getLogger(__name__)

CHAT_GREETING = (
    "Hello! I'm your AI financial assistant. Ask me about your balance, "
    "crypto concepts, or how to use the app."
)


class PortfolioSession:
    """Drives one user's session: ledger, price snapshot, suggestion and chat."""

    def __init__(
        self,
        ledger: Ledger,
        price_client: PriceFeedClient,
        advisory_client: AdvisoryClient,
        chat_client: ChatClient,
        user: SessionLabel | None = None,
        endpoint: EndpointClient | None = None,
    ) -> None:
        self.ledger = ledger
        self.user = user
        self._price_client = price_client
        self._advisory_client = advisory_client
        self._chat_client = chat_client
        self._endpoint = endpoint

        self.prices: PriceSnapshot | None = None
        self.prices_live: bool | None = None
        self.suggestion: str | None = None
        self.status: TransactionStatus | None = None
        self.chat_messages: list[ChatTurn] = [ChatTurn(role="assistant", text=CHAT_GREETING)]

        self._loading_prices = False
        self._loading_suggestion = False
        self._chat_loading = False

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        user: SessionLabel | None = None,
        http_client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ) -> PortfolioSession:
        """Build a session with a fresh ledger and clients sharing one HTTP client."""
        rng = rng or random.Random()
        endpoint = EndpointClient(config.endpoints, http_client)
        return cls(
            ledger=Ledger(config.ledger),
            price_client=PriceFeedClient(endpoint, config.fallback, rng),
            advisory_client=AdvisoryClient(endpoint, config.fallback, rng),
            chat_client=ChatClient(endpoint),
            user=user,
            endpoint=endpoint,
        )

    async def aclose(self) -> None:
        if self._endpoint is not None:
            await self._endpoint.aclose()

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    @property
    def loading_prices(self) -> bool:
        return self._loading_prices

    async def refresh_prices(self) -> FetchResult[PriceSnapshot] | None:
        """Fetch a new snapshot and replace the current one wholesale."""
        if self._loading_prices:
            logger.debug("Price refresh already in flight; ignoring.")
            return None

        self._loading_prices = True
        try:
            result = await self._price_client.fetch_prices()
        finally:
            self._loading_prices = False

        self.prices = result.data
        self.prices_live = result.is_live
        logger.info(
            "Price snapshot refreshed (%s) for %d asset(s).",
            "live" if result.is_live else "offline",
            len(result.data),
        )
        return result

    # ------------------------------------------------------------------
    # Ledger intents
    # ------------------------------------------------------------------

    def top_up(self, amount: Any = None) -> TransactionStatus:
        """Deposit into the cash wallet (default: the configured top-up)."""
        try:
            record = self.ledger.deposit(amount)
        except LedgerError as exc:
            self.status = TransactionStatus(type="error", message=exc.message)
            return self.status

        self.status = TransactionStatus(
            type="success",
            message=f"Successfully added ${record.amount:,.2f} to your wallet.",
        )
        return self.status

    def invest(self, asset_id: str, amount: Any) -> TransactionStatus:
        """Buy *asset_id* for *amount* USD at the current snapshot price."""
        self.status = None
        try:
            record = self.ledger.buy(asset_id, amount, self.prices)
        except LedgerError as exc:
            self.status = TransactionStatus(type="error", message=exc.message)
            return self.status

        self.status = TransactionStatus(
            type="success",
            message=f"Successfully invested ${record.amount:.2f} in {asset_id.upper()}.",
        )
        return self.status

    # ------------------------------------------------------------------
    # Valuation views
    # ------------------------------------------------------------------

    def net_worth(self) -> float:
        return self.ledger.compute_net_worth(self.prices)

    def portfolio_view(self) -> list[HoldingValuation]:
        return self.ledger.valuate(self.prices)

    # ------------------------------------------------------------------
    # Assistant
    # ------------------------------------------------------------------

    @property
    def loading_suggestion(self) -> bool:
        return self._loading_suggestion

    @property
    def chat_loading(self) -> bool:
        return self._chat_loading

    async def generate_suggestion(self) -> str | None:
        """Ask for a suggestion on the current portfolio.

        Does nothing until a price snapshot is available.
        """
        if self.prices is None or self._loading_suggestion:
            return None

        self._loading_suggestion = True
        try:
            request = build_advisory_request(self.ledger.get_portfolio(), self.prices)
            result = await self._advisory_client.generate_suggestion(request)
        finally:
            self._loading_suggestion = False

        self.suggestion = result.data
        return self.suggestion

    async def send_chat(self, message: str) -> str | None:
        """Send one chat turn; blank messages and re-entry are ignored."""
        if not message or not message.strip() or self._chat_loading:
            return None

        self.chat_messages.append(ChatTurn(role="user", text=message))
        self._chat_loading = True
        try:
            context = build_chat_context(self.ledger.get_portfolio(), self.prices)
            result = await self._chat_client.send_message(message, context)
        finally:
            self._chat_loading = False

        self.chat_messages.append(ChatTurn(role="assistant", text=result.data))
        return result.data
