"""LangChain-backed LLM client for the assistant backend."""

from __future__ import annotations

import logging
import os

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from models.config import AssistantConfig

logger = logging.getLogger(__name__)

_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def _create_llm(config: AssistantConfig):
    """Build the chat model for ``config.llm_provider``.

    The provider's API key is read from the environment up front so a missing
    key surfaces as ``RuntimeError("<VAR> is not set")`` before any request.
    """
    provider = config.llm_provider.lower()
    key_env = _API_KEY_ENV.get(provider)
    if key_env is None:
        raise ValueError(
            f"Unsupported LLM provider '{provider}'. "
            f"Supported: {', '.join(repr(p) for p in _API_KEY_ENV)}."
        )
    api_key = os.environ.get(key_env)
    if not api_key:
        raise RuntimeError(f"{key_env} is not set")

    common = {
        "model": config.llm_model,
        "temperature": config.temperature,
        "api_key": api_key,
        "timeout": config.request_timeout_seconds,
        "max_retries": config.max_retries,
    }
    if provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(**common)

    from langchain_anthropic import ChatAnthropic

    return ChatAnthropic(**common)


class LangChainLLMClient:
    """``LLMClient`` implementation over a LangChain chat model."""

    def __init__(self, config: AssistantConfig, llm=None) -> None:
        self._config = config
        self._llm = llm

    def _get_llm(self):
        if self._llm is None:
            self._llm = _create_llm(self._config)
        return self._llm

    async def complete(self, system: str, user: str) -> str:
        messages: list[BaseMessage] = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=user))

        response = await self._get_llm().ainvoke(messages)
        logger.debug("LLM %s replied with %d chars.", self._config.llm_model, len(str(response.content)))
        return str(response.content)
