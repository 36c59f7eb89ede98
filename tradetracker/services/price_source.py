"""Live price fetching.

Prices come from the Binance USD-M futures ticker endpoint. The endpoint has
no reliable multi-symbol query, so a batch issues one request per symbol and
keeps whatever resolves: a slow or broken symbol never sinks the batch.
"""

import asyncio
import logging
import math
import time
from typing import Iterable

import aiohttp
from pydantic import ValidationError

from tradetracker.config import settings
from tradetracker.schemas.price import MarketPrice

logger = logging.getLogger(__name__)


class FeedError(Exception):
    """A price request failed (timeout, bad status or malformed body)."""


class PriceSource:
    """Fetches current prices, with a short per-symbol cache."""

    def __init__(
        self,
        feed_url: str | None = None,
        timeout: float | None = None,
        cache_ttl: float | None = None,
        user_agent: str | None = None,
    ):
        self.feed_url = feed_url or settings.price_feed_url
        self.timeout = timeout if timeout is not None else settings.price_request_timeout
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.price_cache_ttl
        self.headers = {
            "Accept": "application/json",
            "User-Agent": user_agent or settings.user_agent,
        }
        self._cache: dict[str, tuple[float, float]] = {}  # symbol → (price, fetched_at monotonic)

    # -----------------------------------------------------------------------
    # Feed-shaped access (used by the /api/prices proxy)
    # -----------------------------------------------------------------------

    async def fetch_market_prices(self, symbols: Iterable[str] = ()) -> list[MarketPrice]:
        """Fetch quotes for ``symbols``, or the full list when none are given.

        Per-symbol failures are logged and dropped. Only the full-list request
        raises ``FeedError``, since there is nothing partial to return.
        """
        symbol_list = _unique_upper(symbols)
        async with self._session() as session:
            if not symbol_list:
                return await self._fetch_all(session)

            results = await asyncio.gather(
                *(self._fetch_symbol(session, s) for s in symbol_list),
                return_exceptions=True,
            )

        quotes = []
        for symbol, result in zip(symbol_list, results):
            if isinstance(result, Exception):
                logger.warning(f"Price fetch for {symbol} failed: {result}")
                continue
            quotes.append(result)
        return quotes

    # -----------------------------------------------------------------------
    # Parsed access (used by valuation)
    # -----------------------------------------------------------------------

    async def fetch_prices(self, symbols: Iterable[str]) -> dict[str, float]:
        """Return the latest known price per symbol; unresolved symbols are absent.

        Served from cache when every requested symbol was fetched within
        ``cache_ttl`` seconds. Never raises for feed problems.
        """
        symbol_list = _unique_upper(symbols)
        if not symbol_list:
            return {}

        cached = self._cached(symbol_list)
        if cached is not None:
            logger.debug(f"Serving {len(cached)} prices from cache")
            return cached

        try:
            quotes = await self.fetch_market_prices(symbol_list)
        except (aiohttp.ClientError, FeedError) as e:
            logger.error(f"Price batch failed: {e}")
            return {}

        prices = parse_market_prices(quotes)
        fetched_at = time.monotonic()
        for symbol, price in prices.items():
            self._cache[symbol] = (price, fetched_at)

        missing = [s for s in symbol_list if s not in prices]
        if missing:
            logger.warning(f"No live price for {', '.join(missing)}")
        return prices

    def clear_cache(self):
        self._cache.clear()

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )

    def _cached(self, symbols: list[str]) -> dict[str, float] | None:
        now = time.monotonic()
        prices = {}
        for symbol in symbols:
            entry = self._cache.get(symbol)
            if entry is None or now - entry[1] > self.cache_ttl:
                return None
            prices[symbol] = entry[0]
        return prices

    async def _fetch_symbol(self, session: aiohttp.ClientSession, symbol: str) -> MarketPrice:
        """Fetch one symbol, bounded by ``timeout`` seconds."""
        try:
            data = await asyncio.wait_for(
                self._get_json(session, {"symbol": symbol}), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise FeedError(f"timeout after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise FeedError(str(e)) from e

        try:
            return MarketPrice.model_validate(data)
        except ValidationError as e:
            raise FeedError(f"malformed body: {data!r}") from e

    async def _fetch_all(self, session: aiohttp.ClientSession) -> list[MarketPrice]:
        try:
            data = await asyncio.wait_for(self._get_json(session), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise FeedError(f"timeout after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise FeedError(str(e)) from e

        items = data if isinstance(data, list) else [data]
        quotes = []
        for item in items:
            try:
                quotes.append(MarketPrice.model_validate(item))
            except ValidationError:
                logger.debug(f"Skipping malformed quote: {item!r}")
        return quotes

    async def _get_json(self, session: aiohttp.ClientSession, params: dict | None = None):
        async with session.get(self.feed_url, params=params) as response:
            if response.status < 200 or response.status >= 300:
                raise FeedError(f"HTTP {response.status}")
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise FeedError(f"invalid JSON: {e}") from e


def parse_market_prices(quotes: Iterable[MarketPrice]) -> dict[str, float]:
    """Convert feed quotes to a float price map, skipping unparseable prices."""
    prices: dict[str, float] = {}
    for quote in quotes:
        try:
            price = float(quote.price)
        except ValueError:
            logger.debug(f"Unparseable price for {quote.symbol}: {quote.price!r}")
            continue
        if math.isfinite(price):
            prices[quote.symbol.upper()] = price
    return prices


def apply_fallback(
    symbols: Iterable[str],
    prices: dict[str, float],
    fallback: dict[str, float],
) -> dict[str, float]:
    """Substitute static prices after a batch that resolved nothing.

    Symbols without a fallback entry map to 0.0, which valuation treats as
    "no price" rather than a real zero.
    """
    if prices:
        return prices
    return {s: fallback.get(s, 0.0) for s in _unique_upper(symbols)}


def _unique_upper(symbols: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for symbol in symbols:
        text = symbol.strip().upper()
        if text:
            seen.setdefault(text, None)
    return list(seen)
