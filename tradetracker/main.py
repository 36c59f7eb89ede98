"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradetracker.config import settings
from tradetracker.database import create_db_and_tables
from tradetracker.utils.logging import setup_logging
from tradetracker.api import trades, balance, prices, system


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    from tradetracker.engine.state import init_state
    init_state()
    from tradetracker.engine.scheduler import start_scheduler, stop_scheduler
    start_scheduler()

    yield

    stop_scheduler()


app = FastAPI(
    title="Trade Tracker",
    description="Leveraged crypto position tracker with live PnL",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(trades.router)
app.include_router(balance.router)
app.include_router(prices.router)
app.include_router(system.router)
