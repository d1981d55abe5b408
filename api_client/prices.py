"""Price feed client.

Fetches ``{asset id: {"usd": price}}`` from the price endpoint. When the
endpoint fails, waits a simulated network delay and returns synthetic prices
jittered around fixed baselines instead of raising.
"""

from __future__ import annotations

import asyncio
import logging
import random

from pydantic import ValidationError

from api_client.base import EndpointClient, EndpointError
from api_client.mock_data import mock_prices
from models.config import FallbackConfig
from models.prices import PriceSnapshot
from models.results import FetchResult

logger = logging.getLogger(__name__)


class PriceFeedClient:
    def __init__(
        self,
        endpoint: EndpointClient,
        fallback: FallbackConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._fallback = fallback or FallbackConfig()
        self._rng = rng or random.Random()

    async def fetch_prices(self) -> FetchResult[PriceSnapshot]:
        path = self._endpoint.config.prices_path
        try:
            payload = await self._endpoint.post_json(path)
            if isinstance(payload, dict) and "error" in payload:
                raise EndpointError(f"{path}: {payload['error']}")
            snapshot = PriceSnapshot.model_validate(payload)
        except (EndpointError, ValidationError) as exc:
            logger.warning("Price fetch failed, switching to offline mock prices: %s", exc)
            await asyncio.sleep(self._fallback.price_delay_seconds)
            return FetchResult[PriceSnapshot].degraded(
                mock_prices(self._fallback, self._rng), str(exc)
            )

        logger.debug("Fetched live prices for %d asset(s).", len(snapshot))
        return FetchResult[PriceSnapshot].ok(snapshot)
