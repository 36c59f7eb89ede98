"""Shared fixtures: in-memory store and trade builders."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from tradetracker.database import create_db_and_tables
from tradetracker.models.trade import Closed, Direction, Open, Trade
from tradetracker.services.storage import PersistenceError, SQLStore


@pytest.fixture
def memory_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(memory_engine) -> SQLStore:
    return SQLStore(memory_engine)


class FailingStore:
    """Reads nothing, refuses every write."""

    def __init__(self):
        self.save_attempts = 0

    def load(self, key):
        return None

    def save(self, key, value):
        self.save_attempts += 1
        raise PersistenceError("disk full")


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


def make_trade(
    trade_id: str = "t1",
    ticker: str = "BTCUSDT",
    entry_price: float = 30000.0,
    leverage: float = 10.0,
    margin_size: float = 1000.0,
    is_long: bool = True,
    exit_price: float | None = None,
    timestamp: int = 1_700_000_000_000,
) -> Trade:
    return Trade(
        id=trade_id,
        ticker=ticker,
        entry_price=entry_price,
        leverage=leverage,
        margin_size=margin_size,
        direction=Direction.LONG if is_long else Direction.SHORT,
        status=Closed(exit_price=exit_price) if exit_price is not None else Open(),
        timestamp=timestamp,
    )
