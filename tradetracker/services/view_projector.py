"""Valued, filtered and sorted view of the trade list.

Trades themselves stay immutable; everything derived from live prices lives on
the ephemeral ``ValuedTrade`` rows built here.
"""

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Any, Iterable, Mapping

from tradetracker.models.trade import Direction, Trade
from tradetracker.services.pnl import reference_price, value_trade


class SortKey(str, Enum):
    ID = "id"
    TICKER = "ticker"
    ENTRY_PRICE = "entry_price"
    EXIT_PRICE = "exit_price"
    CURRENT_PRICE = "current_price"
    LEVERAGE = "leverage"
    MARGIN_SIZE = "margin_size"
    IS_LONG = "is_long"
    IS_CLOSED = "is_closed"
    PNL = "pnl"
    PNL_PERCENTAGE = "pnl_percentage"
    TIMESTAMP = "timestamp"


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class SortConfig:
    key: SortKey = SortKey.TIMESTAMP
    direction: SortDirection = SortDirection.DESCENDING


@dataclass(frozen=True)
class FilterConfig:
    ticker: str | None = None


@dataclass(frozen=True)
class ValuedTrade:
    trade: Trade
    current_price: float | None = None
    pnl: float | None = None
    pnl_percentage: float | None = None

    # Flattened trade fields so rows sort and serialize uniformly
    @property
    def id(self) -> str:
        return self.trade.id

    @property
    def ticker(self) -> str:
        return self.trade.ticker

    @property
    def entry_price(self) -> float:
        return self.trade.entry_price

    @property
    def exit_price(self) -> float | None:
        return self.trade.exit_price

    @property
    def leverage(self) -> float:
        return self.trade.leverage

    @property
    def margin_size(self) -> float:
        return self.trade.margin_size

    @property
    def is_long(self) -> bool:
        return self.trade.direction is Direction.LONG

    @property
    def is_closed(self) -> bool:
        return self.trade.is_closed

    @property
    def timestamp(self) -> int:
        return self.trade.timestamp


def toggle_sort(config: SortConfig, key: SortKey) -> SortConfig:
    """Flip direction when re-selecting the active key; otherwise start ascending."""
    if config.key == key and config.direction == SortDirection.ASCENDING:
        return SortConfig(key=key, direction=SortDirection.DESCENDING)
    return SortConfig(key=key, direction=SortDirection.ASCENDING)


def annotate(trade: Trade, prices: Mapping[str, float]) -> ValuedTrade:
    current = prices.get(trade.ticker) or None
    if reference_price(trade, current) is None:
        return ValuedTrade(trade=trade, current_price=current)
    result = value_trade(trade, current)
    return ValuedTrade(
        trade=trade,
        current_price=current,
        pnl=result.pnl,
        pnl_percentage=result.pnl_percentage,
    )


def matches_filter(trade: Trade, filter_config: FilterConfig) -> bool:
    if not filter_config.ticker:
        return True
    return filter_config.ticker.lower() in trade.ticker.lower()


def sort_rows(rows: list[ValuedTrade], sort_config: SortConfig) -> list[ValuedTrade]:
    """Stable sort; a missing value on either side compares equal."""
    key = SortKey(sort_config.key).value
    sign = 1 if sort_config.direction == SortDirection.ASCENDING else -1

    def compare(a: ValuedTrade, b: ValuedTrade) -> int:
        a_value: Any = getattr(a, key)
        b_value: Any = getattr(b, key)
        if a_value is None or b_value is None:
            return 0
        if a_value < b_value:
            return -sign
        if a_value > b_value:
            return sign
        return 0

    # list.sort is a stable merge sort, so equal rows keep their input order
    ordered = list(rows)
    ordered.sort(key=cmp_to_key(compare))
    return ordered


def project(
    trades: Iterable[Trade],
    prices: Mapping[str, float],
    sort_config: SortConfig | None = None,
    filter_config: FilterConfig | None = None,
) -> list[ValuedTrade]:
    """Rows for display and export, in display order."""
    sort_config = sort_config or SortConfig()
    filter_config = filter_config or FilterConfig()

    rows = [annotate(t, prices) for t in trades if matches_filter(t, filter_config)]
    return sort_rows(rows, sort_config)
