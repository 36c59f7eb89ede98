"""Persisted and domain models."""

from tradetracker.models.kv_entry import KVEntry
from tradetracker.models.trade import Trade, Direction, Open, Closed, new_trade
from tradetracker.models.balance import Balance, EffectiveBalance

__all__ = [
    "KVEntry",
    "Trade",
    "Direction",
    "Open",
    "Closed",
    "new_trade",
    "Balance",
    "EffectiveBalance",
]
