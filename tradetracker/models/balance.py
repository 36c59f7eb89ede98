"""Balance models — persisted base balance and its derived effective view."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Balance:
    amount: float = 0.0
    last_updated: int = 0  # ms since epoch

    def to_record(self) -> dict[str, Any]:
        return {"amount": self.amount, "lastUpdated": self.last_updated}

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Balance":
        return cls(
            amount=float(record["amount"]),
            last_updated=int(record.get("lastUpdated") or 0),
        )


@dataclass(frozen=True)
class EffectiveBalance:
    """Base balance plus aggregate PnL. Never persisted."""

    amount: float
    last_updated: int
    base_balance: float
    pnl: float
