"""Pydantic schemas for the price feed."""

from pydantic import BaseModel


class MarketPrice(BaseModel):
    """Feed-native price quote; ``price`` stays a decimal string."""

    symbol: str
    price: str
