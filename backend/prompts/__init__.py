"""
Prompts for the assistant backend.

Prompts are loaded from .txt template files in this package directory and
rendered via Jinja2.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

APP_NAME = "My-Money-Map"

# ---------------------------------------------------------------------------
# Jinja2 environment: templates live next to this __init__.py
# ---------------------------------------------------------------------------

_TEMPLATE_DIR = Path(__file__).resolve().parent
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    keep_trailing_newline=True,
)


def _format_cash(cash_balance: Any) -> str:
    if isinstance(cash_balance, bool) or not isinstance(cash_balance, (int, float)):
        return "0.00"
    return f"{cash_balance:.2f}"


def build_suggestion_prompt(portfolio: list[dict[str, Any]], total_value: Any) -> str:
    """Prompt asking for one actionable suggestion plus a short justification."""
    return _env.get_template("suggestion.txt").render(
        total_value=total_value,
        holdings_json=json.dumps(portfolio),
    )


def build_chat_system_prompt(
    portfolio: Any,
    cash_balance: Any,
    prices: Any,
) -> str:
    """System instruction grounding the assistant in the user's live data.

    Missing or non-numeric cash renders as ``0.00``.
    """
    return _env.get_template("chat_system.txt").render(
        app_name=APP_NAME,
        cash_balance=_format_cash(cash_balance),
        portfolio_json=json.dumps(portfolio),
        prices_json=json.dumps(prices),
    )
