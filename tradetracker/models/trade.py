"""Trade model — immutable record of a leveraged position.

Persisted records use the camelCase JSON layout
(``entryPrice``, ``isLong``, ``isClosed`` ...) so stores written by
earlier versions load unchanged.
"""

import time
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"

    @property
    def label(self) -> str:
        return "Long" if self is Direction.LONG else "Short"


@dataclass(frozen=True)
class Open:
    """Position still valued against the live price."""


@dataclass(frozen=True)
class Closed:
    """Position frozen at its exit price."""

    exit_price: float


PositionStatus = Open | Closed


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Trade:
    id: str
    ticker: str
    entry_price: float
    leverage: float
    margin_size: float
    direction: Direction = Direction.LONG
    status: PositionStatus = Open()
    timestamp: int = 0

    @property
    def is_long(self) -> bool:
        return self.direction is Direction.LONG

    @property
    def is_closed(self) -> bool:
        return isinstance(self.status, Closed)

    @property
    def exit_price(self) -> float | None:
        if isinstance(self.status, Closed):
            return self.status.exit_price
        return None

    def closed_at(self, exit_price: float) -> "Trade":
        """Return a copy of this trade closed at ``exit_price``."""
        return replace(self, status=Closed(exit_price=exit_price))

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "ticker": self.ticker,
            "entryPrice": self.entry_price,
            "leverage": self.leverage,
            "marginSize": self.margin_size,
            "isLong": self.is_long,
            "timestamp": self.timestamp,
        }
        if isinstance(self.status, Closed):
            record["exitPrice"] = self.status.exit_price
            record["isClosed"] = True
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Trade":
        """Build a Trade from a stored record.

        Records written before shorts were supported have no ``isLong`` and are
        treated as longs. A record flagged closed without an exit price is
        invalid and raises ``ValueError``.
        """
        is_long = record.get("isLong")
        direction = Direction.SHORT if is_long is False else Direction.LONG

        if record.get("isClosed"):
            exit_price = record.get("exitPrice")
            if exit_price is None:
                raise ValueError(f"closed trade {record.get('id')} has no exitPrice")
            status: PositionStatus = Closed(exit_price=float(exit_price))
        else:
            status = Open()

        return cls(
            id=str(record["id"]),
            ticker=str(record["ticker"]).upper(),
            entry_price=float(record["entryPrice"]),
            leverage=float(record["leverage"]),
            margin_size=float(record["marginSize"]),
            direction=direction,
            status=status,
            timestamp=int(record.get("timestamp") or 0),
        )


def new_trade(
    ticker: str,
    entry_price: float,
    leverage: float,
    margin_size: float,
    is_long: bool = True,
) -> Trade:
    """Create an open trade with a fresh id and the current timestamp.

    Inputs are expected to be validated already (see ``schemas.trade``).
    """
    return Trade(
        id=uuid.uuid4().hex,
        ticker=ticker.strip().upper(),
        entry_price=entry_price,
        leverage=leverage,
        margin_size=margin_size,
        direction=Direction.LONG if is_long else Direction.SHORT,
        status=Open(),
        timestamp=now_ms(),
    )
