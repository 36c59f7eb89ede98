"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'tradetracker.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Price feed (Binance USD-M futures ticker)
    price_feed_url: str = "https://fapi.binance.com/fapi/v1/ticker/price"
    price_request_timeout: float = 5.0  # seconds, per symbol request
    price_cache_ttl: float = 30.0  # seconds
    price_poll_seconds: int = 30
    user_agent: str = "Crypto-Trade-Tracker/1.0.0"

    # Display / export
    money_decimals: int = 2
    display_timezone: str | None = None  # IANA name; None = server local time

    model_config = {"env_prefix": "TT_", "env_file": ".env"}


settings = Settings()
