"""Tests for valuation, filtering and ordering of the trade view."""

import pytest

from tradetracker.services.view_projector import (
    FilterConfig,
    SortConfig,
    SortDirection,
    SortKey,
    annotate,
    project,
    toggle_sort,
)

from conftest import make_trade

ASC = SortDirection.ASCENDING
DESC = SortDirection.DESCENDING


def _ids(rows):
    return [r.id for r in rows]


# ---------------------------------------------------------------------------
# 1. Annotation
# ---------------------------------------------------------------------------

def test_priced_open_trade_is_valued():
    row = annotate(make_trade(), {"BTCUSDT": 31000.0})
    assert row.current_price == 31000.0
    assert (row.pnl, row.pnl_percentage) == (33.33, 33.33)


def test_unpriced_open_trade_stays_unvalued():
    row = annotate(make_trade(), {})
    assert row.current_price is None
    assert row.pnl is None and row.pnl_percentage is None


def test_zero_price_counts_as_unknown():
    row = annotate(make_trade(), {"BTCUSDT": 0.0})
    assert row.current_price is None
    assert row.pnl is None


def test_closed_trade_valuation_is_frozen():
    trade = make_trade(exit_price=31000.0)
    before = annotate(trade, {"BTCUSDT": 31000.0})
    after = annotate(trade, {"BTCUSDT": 50000.0})
    unpriced = annotate(trade, {})
    assert before.pnl == after.pnl == unpriced.pnl == 33.33


# ---------------------------------------------------------------------------
# 2. Filtering
# ---------------------------------------------------------------------------

def test_ticker_filter_is_case_insensitive_substring():
    trades = [
        make_trade("1", ticker="BTCUSDT"),
        make_trade("2", ticker="ETHUSDT"),
        make_trade("3", ticker="XBTCY"),
    ]
    rows = project(trades, {}, SortConfig(SortKey.ID, ASC), FilterConfig(ticker="btc"))
    assert {r.ticker for r in rows} == {"BTCUSDT", "XBTCY"}


@pytest.mark.parametrize("ticker", [None, ""])
def test_empty_filter_keeps_everything(ticker):
    trades = [make_trade("1"), make_trade("2", ticker="ETHUSDT")]
    assert len(project(trades, {}, filter_config=FilterConfig(ticker=ticker))) == 2


# ---------------------------------------------------------------------------
# 3. Sorting
# ---------------------------------------------------------------------------

def test_default_order_is_newest_first():
    trades = [make_trade("old", timestamp=1), make_trade("new", timestamp=3), make_trade("mid", timestamp=2)]
    assert _ids(project(trades, {})) == ["new", "mid", "old"]


def test_numeric_and_string_keys():
    trades = [
        make_trade("a", ticker="SOLUSDT", leverage=20),
        make_trade("b", ticker="BTCUSDT", leverage=5),
        make_trade("c", ticker="ETHUSDT", leverage=10),
    ]
    assert _ids(project(trades, {}, SortConfig(SortKey.LEVERAGE, ASC))) == ["b", "c", "a"]
    assert _ids(project(trades, {}, SortConfig(SortKey.LEVERAGE, DESC))) == ["a", "c", "b"]
    assert _ids(project(trades, {}, SortConfig(SortKey.TICKER, ASC))) == ["b", "c", "a"]


def test_boolean_key_orders_false_first():
    trades = [make_trade("long1"), make_trade("short", is_long=False), make_trade("long2")]
    rows = project(trades, {}, SortConfig(SortKey.IS_LONG, ASC))
    assert _ids(rows) == ["short", "long1", "long2"]


def test_equal_keys_keep_input_order():
    trades = [make_trade(str(i), leverage=5) for i in range(6)]
    for direction in (ASC, DESC):
        rows = project(trades, {}, SortConfig(SortKey.LEVERAGE, direction))
        assert _ids(rows) == ["0", "1", "2", "3", "4", "5"]


def test_missing_values_do_not_trigger_reordering():
    trades = [
        make_trade("priced-high", ticker="BTCUSDT", entry_price=30000),
        make_trade("unpriced", ticker="DOGEUSDT"),
        make_trade("priced-low", ticker="ETHUSDT", entry_price=30000),
    ]
    prices = {"BTCUSDT": 40000.0, "ETHUSDT": 20000.0}
    rows = project(trades, prices, SortConfig(SortKey.CURRENT_PRICE, ASC))
    # every comparison involves the unpriced row, so nothing moves
    assert _ids(rows) == ["priced-high", "unpriced", "priced-low"]


def test_sort_by_pnl():
    trades = [
        make_trade("loss", ticker="ETHUSDT"),
        make_trade("win", ticker="BTCUSDT"),
        make_trade("closed", ticker="SOLUSDT", exit_price=30000),
    ]
    prices = {"BTCUSDT": 31000.0, "ETHUSDT": 29000.0}
    rows = project(trades, prices, SortConfig(SortKey.PNL, DESC))
    assert _ids(rows) == ["win", "closed", "loss"]


def test_resorting_is_idempotent():
    trades = [make_trade(str(i), margin_size=m) for i, m in enumerate([300, 100, 200, 100, 300])]
    config = SortConfig(SortKey.MARGIN_SIZE, ASC)
    once = project(trades, {}, config)
    twice = project([r.trade for r in once], {}, config)
    assert _ids(once) == _ids(twice) == ["1", "3", "2", "0", "4"]


def test_input_sequence_is_not_mutated():
    trades = [make_trade("b", timestamp=1), make_trade("a", timestamp=2)]
    project(trades, {}, SortConfig(SortKey.ID, ASC))
    assert [t.id for t in trades] == ["b", "a"]


# ---------------------------------------------------------------------------
# 4. Sort toggling
# ---------------------------------------------------------------------------

def test_toggle_same_key_flips_direction():
    config = SortConfig(SortKey.PNL, ASC)
    flipped = toggle_sort(config, SortKey.PNL)
    assert flipped == SortConfig(SortKey.PNL, DESC)
    assert toggle_sort(flipped, SortKey.PNL) == config


def test_toggle_new_key_resets_to_ascending():
    assert toggle_sort(SortConfig(SortKey.PNL, DESC), SortKey.TICKER) == SortConfig(SortKey.TICKER, ASC)


def test_toggling_twice_restores_order():
    trades = [make_trade("a", leverage=3), make_trade("b", leverage=1), make_trade("c", leverage=2)]
    config = toggle_sort(SortConfig(), SortKey.LEVERAGE)
    first = _ids(project(trades, {}, config))
    config = toggle_sort(toggle_sort(config, SortKey.LEVERAGE), SortKey.LEVERAGE)
    assert _ids(project(trades, {}, config)) == first == ["b", "c", "a"]
