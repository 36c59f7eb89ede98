"""Authoritative in-memory trade list with write-through persistence."""

import logging
import math
from typing import Iterator

from tradetracker.models.trade import Trade
from tradetracker.services.storage import KeyValueStore, PersistenceError
from tradetracker.utils.constants import TRADES_KEY

logger = logging.getLogger(__name__)


class TradeNotFoundError(KeyError):
    """No trade with the given id."""


class TradeAlreadyClosedError(ValueError):
    """Closed trades are frozen and cannot be closed again."""


class InvalidExitPriceError(ValueError):
    """Exit price must be a positive number."""


class TradeRegistry:
    """Ordered trade sequence owned by one session.

    Every successful mutation saves the full sequence. A failed save is logged
    and otherwise ignored: memory stays the source of truth.
    """

    def __init__(self, store: KeyValueStore, trades: list[Trade] | None = None):
        self.store = store
        self._trades: list[Trade] = list(trades or [])

    @classmethod
    def load(cls, store: KeyValueStore) -> "TradeRegistry":
        raw = store.load(TRADES_KEY)
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning(f"Ignoring stored trades: expected a list, got {type(raw).__name__}")
            return cls(store)

        trades = []
        for record in raw:
            try:
                trades.append(Trade.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable trade record {record!r}: {e}")
        logger.info(f"Loaded {len(trades)} trades")
        return cls(store, trades)

    def __iter__(self) -> Iterator[Trade]:
        return iter(list(self._trades))

    def __len__(self) -> int:
        return len(self._trades)

    @property
    def trades(self) -> list[Trade]:
        return list(self._trades)

    def get(self, trade_id: str) -> Trade:
        for trade in self._trades:
            if trade.id == trade_id:
                return trade
        raise TradeNotFoundError(trade_id)

    def open_tickers(self) -> list[str]:
        """Unique tickers of open trades, in first-seen order."""
        return list(dict.fromkeys(t.ticker for t in self._trades if not t.is_closed))

    def add(self, trade: Trade) -> Trade:
        if any(t.id == trade.id for t in self._trades):
            raise ValueError(f"Duplicate trade id {trade.id}")
        self._trades = [*self._trades, trade]
        logger.info(
            f"Added {trade.direction.label.lower()} {trade.ticker} "
            f"@ {trade.entry_price} x{trade.leverage} margin={trade.margin_size}"
        )
        self._persist()
        return trade

    def remove(self, trade_id: str) -> Trade:
        trade = self.get(trade_id)
        self._trades = [t for t in self._trades if t.id != trade_id]
        logger.info(f"Removed trade {trade_id} ({trade.ticker})")
        self._persist()
        return trade

    def close(self, trade_id: str, exit_price: float) -> Trade:
        if (
            isinstance(exit_price, bool)
            or not isinstance(exit_price, (int, float))
            or not math.isfinite(exit_price)
            or exit_price <= 0
        ):
            raise InvalidExitPriceError(f"Exit price must be positive, got {exit_price!r}")

        trade = self.get(trade_id)
        if trade.is_closed:
            raise TradeAlreadyClosedError(f"Trade {trade_id} is already closed")

        closed = trade.closed_at(float(exit_price))
        self._trades = [closed if t.id == trade_id else t for t in self._trades]
        logger.info(f"Closed trade {trade_id} ({trade.ticker}) @ {exit_price}")
        self._persist()
        return closed

    def _persist(self):
        try:
            self.store.save(TRADES_KEY, [t.to_record() for t in self._trades])
        except PersistenceError as e:
            logger.error(f"Could not persist trades, keeping in-memory state: {e}")
