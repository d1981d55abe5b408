#!/usr/bin/env python3
"""CLI entrypoint for the simulated crypto-portfolio tracker.

Usage::

    python run_session.py --name Alice
    python run_session.py --config config/example.yaml --name Alice --local-backend
    python run_session.py --name Alice --offline

The session logs in, refreshes prices, then reads commands from stdin::

    prices | portfolio | topup | buy <asset> <amount> | history
    suggest | chat <text> | help | quit

With ``--local-backend`` the price, suggestion and chat requests are served
in-process (CoinGecko + the configured LLM) instead of by the remote host.
With ``--offline`` no request leaves the process and every intent uses its
fallback data.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from api_client.base import offline_transport
from backend.handlers import AssistantBackend
from backend.transport import BackendTransport
from models.config import AppConfig
from simulation.identity import login
from simulation.session import PortfolioSession

HELP = (
    "Commands: prices | portfolio | topup | buy <asset> <amount> | history | "
    "suggest | chat <text> | help | quit"
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a simulated crypto-portfolio session.",
    )
    parser.add_argument(
        "--config",
        default=None,
        type=str,
        help="Path to a YAML configuration file (default: built-in defaults).",
    )
    parser.add_argument(
        "--name",
        default=None,
        type=str,
        help="Display name for the session (prompted for if omitted).",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--offline",
        action="store_true",
        help="Skip the remote host; every request takes the offline fallback.",
    )
    mode.add_argument(
        "--local-backend",
        action="store_true",
        help="Serve endpoint requests in-process instead of calling the remote host.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser.parse_args()


def _setup_logging(level: str) -> None:
    """Configure root logger with a clean format."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _print_prices(session: PortfolioSession) -> None:
    if session.prices is None:
        print("No prices yet.")
        return
    mode = "live" if session.prices_live else "offline"
    print(f"Prices ({mode}):")
    for asset_id, quote in session.prices.root.items():
        print(f"  {asset_id:<10} ${quote.usd:>12,.2f}")


def _print_portfolio(session: PortfolioSession) -> None:
    print(f"Cash:      ${session.ledger.cash_balance:,.2f}")
    for item in session.portfolio_view():
        print(f"  {item.symbol:<5} {item.amount:>14.6f}  ${item.value:>12,.2f}")
    print(f"Net worth: ${session.net_worth():,.2f}")


def _print_history(session: PortfolioSession) -> None:
    history = session.ledger.list_history()
    if not history:
        print("No transactions yet.")
    for tx in history:
        print(f"  {tx.date}  {tx.type.value:<7} {tx.asset_id:<10} ${tx.amount:,.2f}  {tx.status}")


async def _dispatch(session: PortfolioSession, line: str) -> bool:
    """Run one command; return ``False`` when the session should end."""
    command, _, rest = line.strip().partition(" ")
    command = command.lower()

    if command in ("quit", "exit"):
        return False
    if command == "prices":
        await session.refresh_prices()
        _print_prices(session)
    elif command == "portfolio":
        _print_portfolio(session)
    elif command == "topup":
        print(session.top_up().message)
    elif command == "buy":
        parts = rest.split()
        if len(parts) != 2:
            print("Usage: buy <asset> <amount>")
        else:
            print(session.invest(parts[0].lower(), parts[1]).message)
    elif command == "history":
        _print_history(session)
    elif command == "suggest":
        suggestion = await session.generate_suggestion()
        print(suggestion if suggestion is not None else "Load prices first.")
    elif command == "chat":
        reply = await session.send_chat(rest)
        if reply is not None:
            print(reply)
    elif command:
        print(HELP)
    return True


async def _main() -> None:
    args = _parse_args()
    _setup_logging(args.log_level)

    logger = logging.getLogger(__name__)
    config = AppConfig.from_yaml(args.config) if args.config else AppConfig()
    config = config.with_env()

    name = args.name or await asyncio.to_thread(input, "Display name: ")
    user = login(name)
    if user is None:
        print("A display name is required.")
        return
    logger.info("Session started for %s (%s).", user.name, user.account_id)

    backend = None
    http_client = None
    if args.offline:
        http_client = httpx.AsyncClient(transport=offline_transport())
    elif args.local_backend:
        backend = AssistantBackend(
            config.assistant,
            asset_ids=[h.id for h in config.ledger.holdings],
        )
        http_client = httpx.AsyncClient(transport=BackendTransport(backend, config.endpoints))

    session = PortfolioSession.from_config(config, user=user, http_client=http_client)
    try:
        print(f"Welcome, {user.name} ({user.account_id}). {HELP}")
        await session.refresh_prices()
        _print_prices(session)
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if not await _dispatch(session, line):
                break
    finally:
        await session.aclose()
        if http_client is not None:
            await http_client.aclose()
        if backend is not None:
            await backend.aclose()


if __name__ == "__main__":
    asyncio.run(_main())
