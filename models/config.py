"""Application configuration models, loaded from YAML.

These live in ``models/`` because they are shared data contracts used by the
ledger, the endpoint clients, the assistant backend and the terminal driver.
Secrets are never read from YAML; they come from the environment (a ``.env``
file is honoured via python-dotenv).
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from models.portfolio import AssetHolding

ANON_KEY_ENV = "MONEY_MAP_ANON_KEY"
BASE_URL_ENV = "MONEY_MAP_BASE_URL"


def _default_holdings() -> list[AssetHolding]:
    return [
        AssetHolding(id="bitcoin", symbol="BTC", name="Bitcoin", amount=0.5),
        AssetHolding(id="ethereum", symbol="ETH", name="Ethereum", amount=2.0),
        AssetHolding(id="solana", symbol="SOL", name="Solana", amount=10.0),
    ]


class LedgerConfig(BaseModel):
    """Seed state for a session's ledger, consumed once at construction."""

    initial_cash: float = Field(
        default=5000.0,
        ge=0,
        description="Starting simulated USD balance.",
    )
    holdings: list[AssetHolding] = Field(
        default_factory=_default_holdings,
        description="Tracked assets and their starting quantities.",
    )
    top_up_amount: float = Field(
        default=1000.0,
        gt=0,
        description="Amount added by a default deposit.",
    )

    @field_validator("holdings")
    @classmethod
    def _unique_ids(cls, holdings: list[AssetHolding]) -> list[AssetHolding]:
        seen: set[str] = set()
        dupes: set[str] = set()
        for holding in holdings:
            if holding.id in seen:
                dupes.add(holding.id)
            seen.add(holding.id)
        if dupes:
            raise ValueError(f"Duplicate holding id(s): {', '.join(sorted(dupes))}.")
        return holdings


class EndpointConfig(BaseModel):
    """Where the price, suggestion and chat endpoints live."""

    base_url: str = Field(
        default="http://localhost:54321/functions/v1",
        description="Base URL of the edge-function host.",
    )
    anon_key: str = Field(
        default="",
        description=f"Static bearer credential. Filled from ${ANON_KEY_ENV} when empty.",
    )
    prices_path: str = "fetch-crypto-prices"
    suggestion_path: str = "generate-suggestion"
    chat_path: str = "chat-assistant"
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout; expiry takes the fallback path.",
    )


class FallbackPrice(BaseModel):
    baseline: float = Field(gt=0)
    jitter: float = Field(default=0.0, ge=0)


def _default_fallback_prices() -> dict[str, FallbackPrice]:
    return {
        "bitcoin": FallbackPrice(baseline=64230.50, jitter=250.0),
        "ethereum": FallbackPrice(baseline=3450.20, jitter=25.0),
        "solana": FallbackPrice(baseline=148.10, jitter=5.0),
    }


class FallbackConfig(BaseModel):
    """Synthetic data used when an endpoint cannot be reached."""

    prices: dict[str, FallbackPrice] = Field(default_factory=_default_fallback_prices)
    price_delay_seconds: float = Field(default=0.8, ge=0)
    suggestion_delay_seconds: float = Field(default=1.5, ge=0)


class AssistantConfig(BaseModel):
    """LLM settings for the in-process assistant backend."""

    llm_provider: str = Field(
        default="openai",
        description="LLM provider identifier, e.g. 'openai', 'anthropic'.",
    )
    llm_model: str = Field(default="gpt-4o-mini", description="Model name.")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    coingecko_url: str = "https://api.coingecko.com/api/v3/simple/price"


class AppConfig(BaseModel):
    """Top-level configuration for a tracker session."""

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)

    def with_env(self) -> AppConfig:
        """Return a copy with endpoint secrets filled from the environment."""
        load_dotenv()
        endpoints = self.endpoints.model_copy(
            update={
                "anon_key": self.endpoints.anon_key or os.environ.get(ANON_KEY_ENV, ""),
                "base_url": os.environ.get(BASE_URL_ENV, self.endpoints.base_url),
            }
        )
        return self.model_copy(update={"endpoints": endpoints})

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppConfig:
        """Load and validate an ``AppConfig`` from a YAML file.

        Raises ``FileNotFoundError`` if the file does not exist and
        ``ValueError`` if the content is not a valid YAML mapping.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(
                f"Expected a YAML mapping in {path}, got {type(raw).__name__}."
            )

        return cls(**raw)
