"""
CONTRACT: Market Snapshot

Input: SnapshotRequest
Output: MarketSnapshot

The single payload consumed by the dashboard. Every numeric field is finite;
missing or failed values have already been replaced by fallbacks.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================


class DataSource(str, Enum):
    """Where the historical series behind the indicators came from."""

    BINANCE = "binance"
    COINGECKO = "coingecko"
    SYNTHETIC = "synthetic"


# =============================================================================
# INPUT: SnapshotRequest
# =============================================================================


class SnapshotRequest(BaseModel):
    """
    Request for a market snapshot.
    Sent by: API endpoint
    Received by: Snapshot Service
    """

    history_length: int = Field(
        default=100,
        ge=50,
        le=1000,
        description="Number of historical closes to fetch (or synthesize)",
    )


# =============================================================================
# OUTPUT: MarketSnapshot
# =============================================================================


class MarketSnapshot(BaseModel):
    """
    Complete BTC/USD snapshot.
    Sent by: Snapshot Service
    Received by: Dashboard
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    # Current values
    current_price: float = Field(..., gt=0)
    current_ema20: float
    current_macd: float
    current_rsi_7: float = Field(..., ge=0, le=100)
    current_rsi_14: float = Field(..., ge=0, le=100)
    current_ema50: float
    current_atr14: float = Field(..., ge=0)

    # Open interest and funding
    open_interest: float
    open_interest_avg: float
    funding_rate: float

    # Intraday series (growing window over the last 10 closes)
    intraday_prices: list[float] = Field(..., min_length=10, max_length=10)
    intraday_ema20: list[float] = Field(..., min_length=10, max_length=10)
    intraday_macd: list[float] = Field(..., min_length=10, max_length=10)
    intraday_rsi_7: list[float] = Field(..., min_length=10, max_length=10)
    intraday_rsi_14: list[float] = Field(..., min_length=10, max_length=10)

    # 4H timeframe
    ema_20_4h: float
    ema_50_4h: float
    atr_3_4h: float
    atr_14_4h: float

    # Volume
    current_volume: float
    average_volume: float

    timestamp: str = Field(..., description="ISO-8601, UTC")
    data_source: DataSource


class IndicatorPreview(BaseModel):
    """Indicator values for a caller-supplied close series."""

    model_config = ConfigDict(allow_inf_nan=False)

    points: int
    ema_20: float
    ema_50: float
    rsi_7: float
    rsi_14: float
    macd: float
