"""CLI tool for offline operations.

Usage:
    python -m tradetracker.cli export [TICKER]
    python -m tradetracker.cli summary
    python -m tradetracker.cli set-balance AMOUNT
"""

import asyncio
import sys

from tradetracker.database import create_db_and_tables
from tradetracker.engine.price_poll import poll_prices
from tradetracker.engine.state import TrackerState, init_state
from tradetracker.services.balance_tracker import BalanceValidationError
from tradetracker.services.csv_export import trades_to_csv
from tradetracker.services.view_projector import FilterConfig
from tradetracker.utils.logging import setup_logging


def _load_state() -> TrackerState:
    setup_logging("WARNING")
    create_db_and_tables()
    return init_state()


def export(ticker: str | None = None):
    """Print the CSV export, valued at a one-off price fetch."""
    state = _load_state()
    asyncio.run(poll_prices(state))
    state.filter_config = FilterConfig(ticker=ticker)
    sys.stdout.write(trades_to_csv(state.rows()))


def summary():
    state = _load_state()
    asyncio.run(poll_prices(state))
    balance = state.effective_balance()
    open_count = sum(1 for t in state.registry if not t.is_closed)

    print(f"Trades:            {len(state.registry)} ({open_count} open)")
    print(f"Base balance:      {balance.base_balance:,.2f}")
    print(f"Total PnL:         {balance.pnl:+,.2f}")
    print(f"Effective balance: {balance.amount:,.2f}")


def set_balance(amount: str):
    state = _load_state()
    try:
        state.balance.set_base(amount)
    except BalanceValidationError as e:
        print(str(e))
        sys.exit(1)
    print(f"Base balance set to {state.balance.base_balance:,.2f}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m tradetracker.cli <command>")
        print("Commands: export [TICKER], summary, set-balance AMOUNT")
        sys.exit(1)

    command = sys.argv[1]
    if command == "export":
        export(sys.argv[2] if len(sys.argv) > 2 else None)
    elif command == "summary":
        summary()
    elif command == "set-balance":
        if len(sys.argv) < 3:
            print("Usage: python -m tradetracker.cli set-balance AMOUNT")
            sys.exit(1)
        set_balance(sys.argv[2])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
