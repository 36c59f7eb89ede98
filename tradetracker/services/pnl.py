"""Stateless PnL computation for leveraged positions.

All functions are pure computation with no I/O.
"""

from dataclasses import dataclass

from tradetracker.models.trade import Closed, Trade


@dataclass(frozen=True)
class PnLResult:
    pnl: float = 0.0
    pnl_percentage: float = 0.0


ZERO_PNL = PnLResult()


def calculate_pnl(
    entry_price: float | None,
    reference_price: float | None,
    leverage: float,
    margin_size: float,
    is_long: bool = True,
) -> PnLResult:
    """PnL of a position valued at ``reference_price``.

    ``reference_price`` is the exit price for a closed trade and the live price
    for an open one. ``pnl_percentage`` is the return on margin; ``pnl`` is
    that return applied to the unleveraged position size
    (``margin_size / leverage``). Leverage must be >= 1.

    Returns ZERO_PNL when either price is zero or missing.
    """
    if not entry_price or not reference_price:
        return ZERO_PNL

    price_diff = reference_price - entry_price if is_long else entry_price - reference_price
    pct_change = (price_diff / entry_price) * 100
    leveraged_pct = pct_change * leverage

    position_size = margin_size / leverage
    pnl = (leveraged_pct / 100 + 1) * position_size - position_size

    return PnLResult(pnl=round(pnl, 2), pnl_percentage=round(leveraged_pct, 2))


def reference_price(trade: Trade, current_price: float | None) -> float | None:
    """Price a trade is valued at, or None if it cannot be valued yet.

    Closed trades always use their exit price, whatever the live market does.
    A zero live price counts as "no price".
    """
    if isinstance(trade.status, Closed):
        return trade.status.exit_price
    return current_price or None


def value_trade(trade: Trade, current_price: float | None) -> PnLResult:
    return calculate_pnl(
        trade.entry_price,
        reference_price(trade, current_price),
        trade.leverage,
        trade.margin_size,
        trade.is_long,
    )
