"""In-process versions of the three assistant endpoints.

Each handler returns ``(status_code, payload)``. Failures are reported as
``(500, {"error": message})`` rather than raised, exactly as a remote
endpoint would report them.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from api_client.llm.client import LLMClient
from backend.llm import LangChainLLMClient
from backend.prompts import build_chat_system_prompt, build_suggestion_prompt
from models.config import AssistantConfig

logger = logging.getLogger(__name__)

COINGECKO_KEY_ENV = "COINGECKO_API_KEY"
DEFAULT_ASSET_IDS = ("bitcoin", "ethereum", "solana")

HandlerResult = tuple[int, dict[str, Any]]


class AssistantBackend:
    """Serves price, suggestion and chat requests without a remote host."""

    def __init__(
        self,
        config: AssistantConfig | None = None,
        asset_ids: list[str] | tuple[str, ...] = DEFAULT_ASSET_IDS,
        llm: LLMClient | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or AssistantConfig()
        self._asset_ids = list(asset_ids)
        self._llm = llm or LangChainLLMClient(self._config)
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=10.0)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def fetch_crypto_prices(self) -> HandlerResult:
        """Current USD prices for the tracked assets from CoinGecko."""
        params = {
            "ids": ",".join(self._asset_ids),
            "vs_currencies": "usd",
            "x_cg_demo_api_key": os.environ.get(COINGECKO_KEY_ENV, ""),
        }
        try:
            response = await self._http.get(self._config.coingecko_url, params=params)
            if response.is_error:
                raise RuntimeError(f"CoinGecko API error: {response.status_code}")
            return 200, response.json()
        except (httpx.HTTPError, ValueError, RuntimeError) as exc:
            logger.error("Price function error: %s", exc)
            return 500, {"error": str(exc)}

    async def generate_suggestion(self, body: dict[str, Any]) -> HandlerResult:
        """One actionable suggestion for the submitted portfolio."""
        try:
            prompt = build_suggestion_prompt(
                body.get("portfolio") or [],
                body.get("totalValue"),
            )
            suggestion = await self._llm.complete("", prompt)
        except Exception as exc:
            logger.error("Suggestion function error: %s", exc)
            return 500, {"error": str(exc)}
        return 200, {"suggestion": suggestion}

    async def chat_assistant(self, body: dict[str, Any]) -> HandlerResult:
        """Assistant reply to ``body["message"]`` grounded in ``body["context"]``."""
        try:
            message = body.get("message")
            if not isinstance(message, str) or not message.strip():
                raise ValueError("message is required")
            context = body.get("context") or {}
            system = build_chat_system_prompt(
                context.get("portfolio"),
                context.get("cashBalance"),
                context.get("prices"),
            )
            reply = await self._llm.complete(system, message)
        except Exception as exc:
            logger.error("Chat function error: %s", exc)
            return 500, {"error": str(exc)}
        return 200, {"reply": reply}
