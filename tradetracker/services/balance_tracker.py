"""Base balance bookkeeping and the effective (base + PnL) view."""

import logging
import math
from typing import Iterable, Mapping

from tradetracker.models.balance import Balance, EffectiveBalance
from tradetracker.models.trade import Trade, now_ms
from tradetracker.services.pnl import value_trade
from tradetracker.services.storage import KeyValueStore, PersistenceError
from tradetracker.utils.constants import BALANCE_KEY

logger = logging.getLogger(__name__)


class BalanceValidationError(ValueError):
    """Balance input was not a non-negative number."""


class BalanceTracker:
    def __init__(self, store: KeyValueStore, balance: Balance | None = None):
        self.store = store
        self.balance = balance or Balance(amount=0.0, last_updated=now_ms())

    @classmethod
    def load(cls, store: KeyValueStore) -> "BalanceTracker":
        raw = store.load(BALANCE_KEY)
        if raw is None:
            return cls(store)
        try:
            return cls(store, Balance.from_record(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable stored balance {raw!r}: {e}")
            return cls(store)

    @property
    def base_balance(self) -> float:
        return self.balance.amount

    def set_base(self, amount) -> Balance:
        """Set the user-entered base balance. Accepts numbers or numeric strings."""
        value = _parse_amount(amount)
        self.balance = Balance(amount=value, last_updated=now_ms())
        logger.info(f"Base balance set to {value:.2f}")
        try:
            self.store.save(BALANCE_KEY, self.balance.to_record())
        except PersistenceError as e:
            logger.error(f"Could not persist balance, keeping in-memory state: {e}")
        return self.balance

    def effective(self, aggregate: float) -> EffectiveBalance:
        return EffectiveBalance(
            amount=round(self.balance.amount + aggregate, 2),
            last_updated=self.balance.last_updated,
            base_balance=self.balance.amount,
            pnl=aggregate,
        )


def aggregate_pnl(trades: Iterable[Trade], prices: Mapping[str, float]) -> float:
    """Sum of per-trade PnL, rounded once at the end.

    Closed trades count at their exit valuation; open trades without a known
    price contribute nothing.
    """
    total = 0.0
    for trade in trades:
        total += value_trade(trade, prices.get(trade.ticker)).pnl
    return round(total, 2)


def _parse_amount(amount) -> float:
    if isinstance(amount, bool):
        raise BalanceValidationError("Please enter a valid positive number")
    try:
        value = float(amount.strip() if isinstance(amount, str) else amount)
    except (TypeError, ValueError):
        raise BalanceValidationError("Please enter a valid positive number") from None
    if not math.isfinite(value) or value < 0:
        raise BalanceValidationError("Please enter a valid positive number")
    return value
