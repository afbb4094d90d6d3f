"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "BTC Pulse Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS (the dashboard is served from anywhere)
    allowed_origins: list[str] = ["*"]

    # Pyth Network (primary price oracle)
    pyth_base_url: str = "https://hermes.pyth.network"
    pyth_btc_price_id: str = (
        "0xe62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"
    )

    # Coinbase (secondary spot price)
    coinbase_base_url: str = "https://api.coinbase.com"
    coinbase_pair: str = "BTC-USD"

    # Binance spot (primary candles)
    binance_base_url: str = "https://api.binance.com"
    binance_symbol: str = "BTCUSDT"
    binance_interval: str = "1h"

    # CoinGecko (secondary history)
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_coin_id: str = "bitcoin"
    coingecko_days: int = 5
    coingecko_api_key: Optional[str] = None

    # Derivatives
    bybit_base_url: str = "https://api.bybit.com"
    bybit_symbol: str = "BTCUSDT"
    binance_futures_base_url: str = "https://fapi.binance.com"

    # Pipeline
    history_length: int = Field(default=100, ge=50, le=1000)
    source_timeout_seconds: float = 8.0

    # Synthetic history (used only when every history source fails)
    synthetic_start_ratio: float = 0.92
    synthetic_noise_ratio: float = 0.02
    synthetic_seed: int = 42

    # Reproduce the old "value || default" substitution (treats 0 as missing)
    legacy_falsy_fallback: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
