"""
Upstream Payload Schemas

Shapes we accept from each market-data provider. A payload that does not
validate against its schema is a failed attempt, never a partial success
(optional extras such as CoinGecko volumes are checked on their own).
Numeric strings are coerced (most exchanges send prices as strings).
"""

from typing import Annotated, Any, Optional
from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, TypeAdapter


# =============================================================================
# PRICE ORACLES
# =============================================================================


class PythPrice(BaseModel):
    """Fixed-point price: actual = price * 10 ** expo."""

    price: int
    expo: int
    conf: Optional[int] = None
    publish_time: Optional[int] = None


class PythPriceFeed(BaseModel):
    id: str
    price: PythPrice


PYTH_FEEDS = TypeAdapter(Annotated[list[PythPriceFeed], Field(min_length=1)])


class CoinbaseSpotData(BaseModel):
    amount: FiniteFloat
    currency: str = "USD"


class CoinbaseSpot(BaseModel):
    data: CoinbaseSpotData


# =============================================================================
# HISTORY
# =============================================================================

# Binance kline: [open_time, open, high, low, close, volume, close_time, ...]
Kline = Annotated[list[FiniteFloat], Field(min_length=6)]
BINANCE_KLINES = TypeAdapter(Annotated[list[Kline], Field(min_length=1)])

KLINE_HIGH = 2
KLINE_LOW = 3
KLINE_CLOSE = 4
KLINE_VOLUME = 5

# CoinGecko chart point: [timestamp_ms, value]
ChartPoint = Annotated[list[FiniteFloat], Field(min_length=2, max_length=2)]
CHART_POINTS = TypeAdapter(list[ChartPoint])


class CoinGeckoMarketChart(BaseModel):
    prices: list[ChartPoint] = Field(..., min_length=1)
    # Validated separately with CHART_POINTS; bad volumes must not discard prices
    total_volumes: Any = None


# =============================================================================
# DERIVATIVES
# =============================================================================


class BybitTicker(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    open_interest: FiniteFloat = Field(..., alias="openInterest")
    funding_rate: FiniteFloat = Field(..., alias="fundingRate")


class BybitTickerResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tickers: list[BybitTicker] = Field(..., alias="list", min_length=1)


class BybitTickerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ret_code: int = Field(..., alias="retCode")
    result: BybitTickerResult


class BinancePremiumIndex(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    last_funding_rate: FiniteFloat = Field(..., alias="lastFundingRate")


class BinanceOpenInterest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    open_interest: FiniteFloat = Field(..., alias="openInterest")
