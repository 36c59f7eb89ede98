"""CLI tests: commands run through main() against an in-memory store."""

import csv
import io
import sys
from unittest.mock import AsyncMock

import pytest

from tradetracker import cli
from tradetracker.engine.state import TrackerState
from tradetracker.services.price_source import PriceSource
from tradetracker.utils.constants import BALANCE_KEY, CSV_HEADERS

from conftest import make_trade


@pytest.fixture
def state(store) -> TrackerState:
    source = PriceSource(feed_url="https://feed.test")
    source.fetch_prices = AsyncMock(return_value={"BTCUSDT": 31000.0})
    return TrackerState(store, price_source=source)


@pytest.fixture
def run_cli(monkeypatch, state):
    monkeypatch.setattr(cli, "setup_logging", lambda level=None: None)
    monkeypatch.setattr(cli, "create_db_and_tables", lambda: None)
    monkeypatch.setattr(cli, "init_state", lambda: state)

    def run(*args):
        monkeypatch.setattr(sys, "argv", ["tradetracker.cli", *args])
        cli.main()

    return run


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_export_prints_valued_csv(run_cli, state, capsys):
    state.registry.add(make_trade("t1", timestamp=1_700_000_000_000))
    state.registry.add(
        make_trade("t2", ticker="ETHUSDT", entry_price=3000, leverage=5, margin_size=500,
                   exit_price=3300, timestamp=1_700_000_100_000)
    )

    run_cli("export")

    rows = _parse(capsys.readouterr().out)
    assert rows[0] == CSV_HEADERS
    # newest first
    assert [r[0] for r in rows[1:]] == ["ETHUSDT", "BTCUSDT"]
    assert rows[1][3:9] == ["3,300", "Closed", "5x", "500.00", "50.00", "+50.00%"]
    assert rows[2][3:9] == ["", "31,000", "10x", "1,000.00", "33.33", "+33.33%"]
    state.price_source.fetch_prices.assert_awaited_once_with(["BTCUSDT"])


def test_export_ticker_filter(run_cli, state, capsys):
    state.registry.add(make_trade("t1"))
    state.registry.add(make_trade("t2", ticker="ETHUSDT", entry_price=3000, exit_price=3300))

    run_cli("export", "eth")

    rows = _parse(capsys.readouterr().out)
    assert [r[0] for r in rows[1:]] == ["ETHUSDT"]


def test_summary(run_cli, state, capsys):
    state.balance.set_base(1000)
    state.registry.add(make_trade("t1"))

    run_cli("summary")

    out = capsys.readouterr().out
    assert "Trades:            1 (1 open)" in out
    assert "Base balance:      1,000.00" in out
    assert "Total PnL:         +33.33" in out
    assert "Effective balance: 1,033.33" in out


def test_set_balance(run_cli, store, capsys):
    run_cli("set-balance", "2500")

    assert "Base balance set to 2,500.00" in capsys.readouterr().out
    assert store.load(BALANCE_KEY)["amount"] == 2500


@pytest.mark.parametrize("args", [("set-balance", "abc"), ("set-balance",), ("bogus",), ()])
def test_bad_invocations_exit_1(run_cli, store, args):
    with pytest.raises(SystemExit) as exc:
        run_cli(*args)
    assert exc.value.code == 1
    assert store.load(BALANCE_KEY) is None
