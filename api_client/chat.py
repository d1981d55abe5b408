"""Chat client: one assistant turn grounded in the user's ledger state."""

from __future__ import annotations

import logging

from api_client.base import EndpointClient, EndpointError, require_field
from api_client.mock_data import OFFLINE_CHAT_REPLY
from models.context import ChatContext, ChatRequest
from models.results import FetchResult

logger = logging.getLogger(__name__)


class ChatClient:
    def __init__(self, endpoint: EndpointClient) -> None:
        self._endpoint = endpoint

    async def send_message(self, utterance: str, context: ChatContext) -> FetchResult[str]:
        """Return the assistant's reply, or a fixed apology on failure."""
        path = self._endpoint.config.chat_path
        body = ChatRequest(message=utterance, context=context).to_payload()
        try:
            payload = await self._endpoint.post_json(path, body)
            reply = require_field(payload, "reply", path)
            if not isinstance(reply, str):
                raise EndpointError(f"{path}: reply is not a string")
        except EndpointError as exc:
            logger.warning("Chat request failed, returning offline reply: %s", exc)
            return FetchResult[str].degraded(OFFLINE_CHAT_REPLY, str(exc))

        return FetchResult[str].ok(reply)
