"""Tests for the PnL engine."""

import pytest

from tradetracker.services.pnl import (
    ZERO_PNL,
    PnLResult,
    calculate_pnl,
    reference_price,
    value_trade,
)

from conftest import make_trade


# ---------------------------------------------------------------------------
# 1. Worked scenarios
# ---------------------------------------------------------------------------

def test_long_scenario():
    result = calculate_pnl(30000, 31000, leverage=10, margin_size=1000, is_long=True)
    assert result == PnLResult(pnl=33.33, pnl_percentage=33.33)


def test_short_scenario():
    result = calculate_pnl(30000, 31000, leverage=10, margin_size=1000, is_long=False)
    assert result == PnLResult(pnl=-33.33, pnl_percentage=-33.33)


def test_direction_defaults_to_long():
    assert calculate_pnl(100, 110, 2, 500) == calculate_pnl(100, 110, 2, 500, is_long=True)


def test_short_profits_when_price_falls():
    result = calculate_pnl(2000, 1800, leverage=5, margin_size=200, is_long=False)
    assert result.pnl_percentage == 50.0
    assert result.pnl == 20.0


# ---------------------------------------------------------------------------
# 2. Properties
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("leverage", [1, 3, 25, 125])
@pytest.mark.parametrize("is_long", [True, False])
def test_unchanged_price_is_flat(leverage, is_long):
    result = calculate_pnl(1234.5, 1234.5, leverage, 777, is_long)
    assert result.pnl == 0
    assert result.pnl_percentage == 0


@pytest.mark.parametrize(
    "entry,reference,leverage",
    [(100.0, 105.0, 3), (0.5, 0.45, 20), (64000.0, 61234.5, 7.5)],
)
def test_percentage_is_leveraged_price_return(entry, reference, leverage):
    expected = (reference - entry) / entry * 100 * leverage
    assert calculate_pnl(entry, reference, leverage, 100, True).pnl_percentage == pytest.approx(expected, abs=0.005)
    assert calculate_pnl(entry, reference, leverage, 100, False).pnl_percentage == pytest.approx(-expected, abs=0.005)


def test_doubling_leverage_doubles_percentage():
    single = calculate_pnl(100, 104, 5, 1000)
    double = calculate_pnl(100, 104, 10, 1000)
    assert double.pnl_percentage == pytest.approx(single.pnl_percentage * 2, abs=0.01)


def test_pnl_is_return_on_unleveraged_position_size():
    # margin / leverage is the capital at risk, so the absolute PnL does not scale with leverage
    low = calculate_pnl(100, 104, 5, 1000)
    high = calculate_pnl(100, 104, 10, 1000)
    assert low.pnl == high.pnl == 40.0


# ---------------------------------------------------------------------------
# 3. Degenerate input
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("entry,reference", [(0, 100), (100, 0), (None, 100), (100, None)])
def test_missing_prices_return_zero_sentinel(entry, reference):
    assert calculate_pnl(entry, reference, 10, 1000) is ZERO_PNL


# ---------------------------------------------------------------------------
# 4. Trade valuation
# ---------------------------------------------------------------------------

def test_open_trade_uses_current_price():
    trade = make_trade()
    assert reference_price(trade, 31000.0) == 31000.0
    assert value_trade(trade, 31000.0).pnl == 33.33


def test_open_trade_without_price_is_unvalued():
    trade = make_trade()
    assert reference_price(trade, None) is None
    assert reference_price(trade, 0.0) is None
    assert value_trade(trade, None) == ZERO_PNL


def test_closed_trade_ignores_live_price():
    trade = make_trade(exit_price=31000.0)
    assert reference_price(trade, 45000.0) == 31000.0
    assert value_trade(trade, 45000.0) == value_trade(trade, None) == PnLResult(33.33, 33.33)
