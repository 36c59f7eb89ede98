"""APScheduler integration for FastAPI.

Runs the price poll on a fixed interval. ``max_instances=1`` with coalescing
keeps at most one batch in flight; an overrunning batch delays the next tick
instead of stacking up behind it.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tradetracker.config import settings

logger = logging.getLogger(__name__)

PRICE_JOB_ID = "price_poll"

scheduler = AsyncIOScheduler()


def add_price_job(interval_seconds: int | None = None):
    """Add or replace the price poll job; the first run happens immediately."""
    from tradetracker.engine.price_poll import poll_prices

    seconds = interval_seconds or settings.price_poll_seconds
    scheduler.add_job(
        poll_prices,
        trigger=IntervalTrigger(seconds=seconds),
        id=PRICE_JOB_ID,
        name="Price poll",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=seconds,
        next_run_time=datetime.now(timezone.utc),
    )
    logger.info(f"Scheduled price poll every {seconds}s")


def request_refresh():
    """Pull the next price poll forward to now (e.g. after a trade was added)."""
    job = scheduler.get_job(PRICE_JOB_ID)
    if job is None or not scheduler.running:
        return
    job.modify(next_run_time=datetime.now(timezone.utc))
    logger.debug("Price refresh requested")


def start_scheduler():
    """Start the scheduler with the price poll job."""
    add_price_job()
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


def stop_scheduler():
    """Shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")


def get_scheduler_status() -> dict:
    """Return current scheduler state for the API."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "job_count": len(jobs),
        "jobs": [
            {
                "id": j.id,
                "name": j.name,
                "next_run": str(j.next_run_time) if j.next_run_time else None,
                "trigger": str(j.trigger),
            }
            for j in jobs
        ],
    }
