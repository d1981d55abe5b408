"""Advisory client: asks the suggestion endpoint for portfolio guidance."""

from __future__ import annotations

import asyncio
import logging
import random

from api_client.base import EndpointClient, EndpointError, require_field
from api_client.mock_data import mock_suggestion
from models.config import FallbackConfig
from models.context import AdvisoryRequest
from models.results import FetchResult

logger = logging.getLogger(__name__)


class AdvisoryClient:
    def __init__(
        self,
        endpoint: EndpointClient,
        fallback: FallbackConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._fallback = fallback or FallbackConfig()
        self._rng = rng or random.Random()

    async def generate_suggestion(self, request: AdvisoryRequest) -> FetchResult[str]:
        """Return the endpoint's suggestion, or a canned offline one on failure."""
        path = self._endpoint.config.suggestion_path
        try:
            payload = await self._endpoint.post_json(path, request.to_payload())
            suggestion = require_field(payload, "suggestion", path)
            if not isinstance(suggestion, str) or not suggestion.strip():
                raise EndpointError(f"{path}: empty suggestion")
        except EndpointError as exc:
            logger.warning("Suggestion request failed, using offline suggestion: %s", exc)
            await asyncio.sleep(self._fallback.suggestion_delay_seconds)
            return FetchResult[str].degraded(mock_suggestion(self._rng), str(exc))

        return FetchResult[str].ok(suggestion)
