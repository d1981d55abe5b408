"""Shared HTTP plumbing for the price, suggestion and chat endpoints.

All three endpoints are POSTed JSON with a static bearer credential. Any
transport problem (connection error, timeout, non-2xx status, body that is
not JSON) surfaces as ``EndpointError``; the endpoint clients catch it and
switch to their fallback data, so it never reaches the ledger.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from models.config import EndpointConfig

logger = logging.getLogger(__name__)


class EndpointError(Exception):
    """A remote call did not produce a usable response."""


class EndpointClient:
    """Thin async wrapper around one ``httpx.AsyncClient``.

    Pass *http_client* to share a client or to inject a
    ``httpx.MockTransport``-backed one; otherwise a client is created and
    closed by ``aclose``.
    """

    def __init__(
        self,
        config: EndpointConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> EndpointClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def url_for(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def post_json(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """POST *body* to *path* and return the decoded JSON response."""
        url = self.url_for(path)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.anon_key}",
        }
        try:
            response = await self._client.post(
                url,
                json=body,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise EndpointError(
                f"{path}: HTTP {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            raise EndpointError(f"{path}: {type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise EndpointError(f"{path}: response is not valid JSON") from exc


def offline_transport() -> httpx.MockTransport:
    """Transport that refuses every request, forcing the fallback path."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline mode", request=request)

    return httpx.MockTransport(refuse)


def require_field(payload: Any, field: str, path: str) -> Any:
    """Return ``payload[field]`` or raise ``EndpointError`` if it is missing.

    Endpoints report their own failures as ``{"error": ...}`` with a 2xx
    status in some deployments, so that shape is treated as a failure too.
    """
    if not isinstance(payload, dict):
        raise EndpointError(f"{path}: expected a JSON object, got {type(payload).__name__}")
    if field not in payload:
        error = payload.get("error", f"missing '{field}'")
        raise EndpointError(f"{path}: {error}")
    return payload[field]
