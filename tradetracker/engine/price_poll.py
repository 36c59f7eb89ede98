"""Periodic price refresh for open trades.

This is the function APScheduler calls on each interval:
open tickers → live fetch → fallback on total failure → price book.
"""

import itertools
import logging
import time
from typing import Mapping

from tradetracker.services.price_source import apply_fallback
from tradetracker.utils.constants import FALLBACK_PRICES

logger = logging.getLogger(__name__)


class PriceBook:
    """Latest observed price per ticker.

    Every batch gets an increasing id when it starts. A batch that finishes
    late never overwrites a symbol already written by a newer batch.
    """

    def __init__(self):
        self._prices: dict[str, float] = {}
        self._written_by: dict[str, int] = {}
        self._batch_ids = itertools.count(1)
        self.last_updated: float | None = None

    def begin_batch(self) -> int:
        return next(self._batch_ids)

    def apply(self, batch_id: int, prices: Mapping[str, float]) -> int:
        """Record a batch's prices; returns how many symbols were written."""
        written = 0
        for symbol, price in prices.items():
            if not price:
                continue  # zero means "unknown", never a real price
            if self._written_by.get(symbol, 0) > batch_id:
                logger.debug(f"Discarding stale {symbol} price from batch {batch_id}")
                continue
            self._prices[symbol] = price
            self._written_by[symbol] = batch_id
            written += 1
        if written:
            self.last_updated = time.time()
        return written

    def get(self, symbol: str) -> float | None:
        return self._prices.get(symbol)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._prices

    def snapshot(self) -> dict[str, float]:
        return dict(self._prices)


async def poll_prices(state=None) -> dict[str, float]:
    """Run one price batch for the open trades of ``state``.

    Returns the price book snapshot after the batch. Feed failures never
    propagate: a batch that resolves nothing falls back to static prices for
    tickers that have no observation yet and keeps stale ones otherwise.
    """
    if state is None:
        from tradetracker.engine.state import get_state
        state = get_state()

    tickers = state.registry.open_tickers()
    if not tickers:
        return state.prices.snapshot()

    batch_id = state.prices.begin_batch()
    live = await state.price_source.fetch_prices(tickers)

    if live:
        written = state.prices.apply(batch_id, live)
        logger.info(f"Price batch {batch_id}: {written}/{len(tickers)} tickers updated")
    else:
        unseen = [t for t in tickers if t not in state.prices]
        fallback = apply_fallback(unseen, {}, FALLBACK_PRICES)
        written = state.prices.apply(batch_id, fallback)
        logger.warning(
            f"Price batch {batch_id} failed for all {len(tickers)} tickers; "
            f"using fallback prices for {written}"
        )

    return state.prices.snapshot()
