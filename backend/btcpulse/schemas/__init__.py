"""
BTC Pulse Schema Contracts

This module defines the JSON contracts between the service and its callers,
and the shapes accepted from upstream providers.
"""

from btcpulse.schemas.snapshot import (
    DataSource,
    SnapshotRequest,
    MarketSnapshot,
    IndicatorPreview,
)
from btcpulse.schemas.upstream import (
    PythPriceFeed,
    CoinbaseSpot,
    CoinGeckoMarketChart,
    BybitTickerResponse,
    BinancePremiumIndex,
    BinanceOpenInterest,
)

__all__ = [
    # Snapshot
    "DataSource",
    "SnapshotRequest",
    "MarketSnapshot",
    "IndicatorPreview",
    # Upstream
    "PythPriceFeed",
    "CoinbaseSpot",
    "CoinGeckoMarketChart",
    "BybitTickerResponse",
    "BinancePremiumIndex",
    "BinanceOpenInterest",
]
