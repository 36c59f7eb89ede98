"""Session state: the single owner of trades, balance and prices.

Every API endpoint that touches this state is a coroutine, so mutations run
one at a time on the event loop thread alongside the scheduled price poll.
"""

import logging

from tradetracker.engine.price_poll import PriceBook
from tradetracker.models.balance import EffectiveBalance
from tradetracker.services.balance_tracker import BalanceTracker, aggregate_pnl
from tradetracker.services.price_source import PriceSource
from tradetracker.services.storage import KeyValueStore
from tradetracker.services.trade_registry import TradeRegistry
from tradetracker.services.view_projector import (
    FilterConfig,
    SortConfig,
    ValuedTrade,
    project,
)

logger = logging.getLogger(__name__)


class TrackerState:
    def __init__(self, store: KeyValueStore, price_source: PriceSource | None = None):
        self.store = store
        self.registry = TradeRegistry.load(store)
        self.balance = BalanceTracker.load(store)
        self.price_source = price_source or PriceSource()
        self.prices = PriceBook()
        self.sort_config = SortConfig()
        self.filter_config = FilterConfig()

    def rows(self) -> list[ValuedTrade]:
        """Trades as currently displayed (valued, filtered, sorted)."""
        return project(
            self.registry,
            self.prices.snapshot(),
            self.sort_config,
            self.filter_config,
        )

    def total_pnl(self) -> float:
        return aggregate_pnl(self.registry, self.prices.snapshot())

    def effective_balance(self) -> EffectiveBalance:
        return self.balance.effective(self.total_pnl())


_state: TrackerState | None = None


def init_state(store: KeyValueStore | None = None, price_source: PriceSource | None = None) -> TrackerState:
    """Create the process-wide state, loading trades and balance from the store."""
    global _state
    if store is None:
        from tradetracker.database import engine
        from tradetracker.services.storage import SQLStore
        store = SQLStore(engine)
    _state = TrackerState(store, price_source)
    logger.info(f"Tracker state ready with {len(_state.registry)} trades")
    return _state


def get_state() -> TrackerState:
    if _state is None:
        return init_state()
    return _state
