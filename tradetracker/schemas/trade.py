"""Pydantic schemas for the trades and balance API."""

from pydantic import BaseModel, Field, field_validator

from tradetracker.models.balance import EffectiveBalance
from tradetracker.services.view_projector import (
    FilterConfig,
    SortConfig,
    SortDirection,
    SortKey,
    ValuedTrade,
)
from tradetracker.utils.constants import MAX_LEVERAGE, MIN_LEVERAGE


class TradeCreate(BaseModel):
    ticker: str = Field(min_length=1, max_length=32)
    entry_price: float = Field(gt=0, allow_inf_nan=False)
    leverage: float = Field(default=1.0, ge=MIN_LEVERAGE, le=MAX_LEVERAGE, allow_inf_nan=False)
    margin_size: float = Field(gt=0, allow_inf_nan=False)
    is_long: bool = True

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text


class TradeClose(BaseModel):
    exit_price: float = Field(gt=0, allow_inf_nan=False)


class TradeRead(BaseModel):
    id: str
    ticker: str
    entry_price: float
    exit_price: float | None
    current_price: float | None
    leverage: float
    margin_size: float
    is_long: bool
    is_closed: bool
    pnl: float | None
    pnl_percentage: float | None
    timestamp: int

    @classmethod
    def from_row(cls, row: ValuedTrade) -> "TradeRead":
        return cls(
            id=row.id,
            ticker=row.ticker,
            entry_price=row.entry_price,
            exit_price=row.exit_price,
            current_price=row.current_price,
            leverage=row.leverage,
            margin_size=row.margin_size,
            is_long=row.is_long,
            is_closed=row.is_closed,
            pnl=row.pnl,
            pnl_percentage=row.pnl_percentage,
            timestamp=row.timestamp,
        )


class SortRead(BaseModel):
    key: SortKey
    direction: SortDirection

    @classmethod
    def from_config(cls, config: SortConfig) -> "SortRead":
        return cls(key=config.key, direction=config.direction)


class FilterUpdate(BaseModel):
    ticker: str | None = Field(default=None, max_length=32)


class FilterRead(BaseModel):
    ticker: str | None = None

    @classmethod
    def from_config(cls, config: FilterConfig) -> "FilterRead":
        return cls(ticker=config.ticker)


class BalanceUpdate(BaseModel):
    amount: float = Field(ge=0, allow_inf_nan=False)


class BalanceRead(BaseModel):
    amount: float
    last_updated: int
    base_balance: float
    pnl: float

    @classmethod
    def from_effective(cls, balance: EffectiveBalance) -> "BalanceRead":
        return cls(
            amount=balance.amount,
            last_updated=balance.last_updated,
            base_balance=balance.base_balance,
            pnl=balance.pnl,
        )
