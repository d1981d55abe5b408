"""httpx transport that routes endpoint requests to an ``AssistantBackend``.

Plugging this transport into the ``httpx.AsyncClient`` used by the endpoint
clients lets a session run against the in-process backend with no network
host in between.
"""

from __future__ import annotations

import json
import logging

import httpx

from backend.handlers import AssistantBackend
from models.config import EndpointConfig

logger = logging.getLogger(__name__)


class BackendTransport(httpx.AsyncBaseTransport):
    def __init__(self, backend: AssistantBackend, endpoints: EndpointConfig) -> None:
        self._backend = backend
        self._routes = {
            _last_segment(endpoints.prices_path): "prices",
            _last_segment(endpoints.suggestion_path): "suggestion",
            _last_segment(endpoints.chat_path): "chat",
        }

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        route = self._routes.get(_last_segment(request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": f"No route for {request.url.path}"})

        body: dict = {}
        raw = await request.aread()
        if raw:
            try:
                body = json.loads(raw)
            except ValueError:
                return httpx.Response(400, json={"error": "Request body is not valid JSON"})
            if not isinstance(body, dict):
                return httpx.Response(400, json={"error": "Request body must be a JSON object"})

        if route == "prices":
            status, payload = await self._backend.fetch_crypto_prices()
        elif route == "suggestion":
            status, payload = await self._backend.generate_suggestion(body)
        else:
            status, payload = await self._backend.chat_assistant(body)

        logger.debug("Local backend %s -> %d", route, status)
        return httpx.Response(status, json=payload)


def _last_segment(path: str) -> str:
    return path.strip("/").rsplit("/", 1)[-1]
