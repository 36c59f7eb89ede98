"""System API — health check, scheduler status, manual price refresh."""

from fastapi import APIRouter, Depends

from tradetracker.api.deps import get_tracker
from tradetracker.engine.state import TrackerState

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/scheduler")
def scheduler_status():
    """Current scheduler state with job details."""
    from tradetracker.engine.scheduler import get_scheduler_status
    return get_scheduler_status()


@router.post("/refresh-prices")
async def refresh_prices(state: TrackerState = Depends(get_tracker)):
    """Run one price batch now and return the resulting price map."""
    from tradetracker.engine.price_poll import poll_prices
    prices = await poll_prices(state)
    return {"status": "ok", "prices": prices}
