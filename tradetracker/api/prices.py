"""Prices API — thin proxy over the futures ticker feed."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tradetracker.api.deps import get_tracker
from tradetracker.engine.state import TrackerState
from tradetracker.services.price_source import FeedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prices", tags=["prices"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}


@router.get("")
async def get_prices(symbols: str | None = None, state: TrackerState = Depends(get_tracker)):
    """Current prices as ``[{symbol, price}]``; all symbols when none are given."""
    symbol_list = [s for s in (symbols or "").split(",") if s.strip()]
    try:
        quotes = await state.price_source.fetch_market_prices(symbol_list)
        if symbol_list and not quotes:
            raise FeedError(f"no prices resolved for {', '.join(symbol_list)}")
    except FeedError as e:
        logger.error(f"Error fetching prices: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch prices", "message": str(e)},
            headers=CORS_HEADERS,
        )

    return JSONResponse(
        content=[q.model_dump() for q in quotes],
        headers={
            **CORS_HEADERS,
            "Cache-Control": "public, s-maxage=30, stale-while-revalidate=60",
        },
    )
