"""CSV export of the trade view.

Columns and formatting mirror the trade table, so an export is exactly what
the user is looking at.
"""

import csv
import io
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from tradetracker.config import settings
from tradetracker.services.view_projector import ValuedTrade
from tradetracker.utils.constants import CSV_HEADERS


def format_number(value: float, max_decimals: int = 2) -> str:
    """Thousands-separated number with at most ``max_decimals`` decimals, zeros trimmed."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    text = f"{value:,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_number_with_commas(value: float, decimals: int = 2) -> str:
    """Thousands-separated number with exactly ``decimals`` decimals."""
    return f"{value:,.{decimals}f}"


def format_date(timestamp_ms: int, tz: str | None = None) -> str:
    """US-locale date/time, e.g. ``3/14/2024, 9:05:00 PM``."""
    zone = ZoneInfo(tz) if tz else None
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=zone)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {meridiem}"


def format_leverage(leverage: float) -> str:
    if float(leverage).is_integer():
        return f"{int(leverage)}x"
    return f"{leverage}x"


def format_percentage(value: float) -> str:
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def row_values(row: ValuedTrade, money_decimals: int, tz: str | None) -> list[str]:
    if row.is_closed:
        current = "Closed"
    elif row.current_price:
        current = format_number(row.current_price, 8)
    else:
        current = ""

    return [
        row.ticker,
        "Long" if row.is_long else "Short",
        format_number(row.entry_price, 8),
        format_number(row.exit_price, 8) if row.exit_price else "",
        current,
        format_leverage(row.leverage),
        format_number_with_commas(row.margin_size, money_decimals),
        # sign lives in the percentage column only
        format_number_with_commas(abs(row.pnl), money_decimals) if row.pnl is not None else "",
        format_percentage(row.pnl_percentage) if row.pnl_percentage is not None else "",
        format_date(row.timestamp, tz),
    ]


def trades_to_csv(
    rows: Iterable[ValuedTrade],
    money_decimals: int | None = None,
    tz: str | None = None,
) -> str:
    """Serialize projected rows to CSV text, header first, in the given order."""
    decimals = settings.money_decimals if money_decimals is None else money_decimals
    zone = tz if tz is not None else settings.display_timezone

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(row_values(row, decimals, zone))
    return buffer.getvalue()
