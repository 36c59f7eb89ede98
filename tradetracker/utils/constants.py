"""Shared constants and defaults."""

# Storage keys, kept identical to the browser-era record layout
TRADES_KEY = "crypto-trades"
BALANCE_KEY = "crypto-balance"

MIN_LEVERAGE = 1.0
MAX_LEVERAGE = 125.0

# Last-known reasonable USDT-M prices, used only when the live feed is unreachable
FALLBACK_PRICES: dict[str, float] = {
    "BTCUSDT": 65000.0,
    "ETHUSDT": 3200.0,
    "BNBUSDT": 580.0,
    "SOLUSDT": 150.0,
    "XRPUSDT": 0.52,
    "DOGEUSDT": 0.12,
    "ADAUSDT": 0.45,
    "AVAXUSDT": 28.0,
    "LINKUSDT": 14.0,
    "DOTUSDT": 6.5,
    "LTCUSDT": 75.0,
    "TRXUSDT": 0.12,
}

CSV_HEADERS = [
    "Ticker",
    "Position",
    "Entry Price",
    "Exit Price",
    "Current Price",
    "Leverage",
    "Margin Size",
    "PnL",
    "PnL Percentage",
    "Date",
]
