"""
Market Data Sources

RESPONSIBILITIES:
    - Fetch the live price (Pyth, Coinbase)
    - Fetch recent candles (Binance, CoinGecko)
    - Fetch open interest and funding (Bybit, Binance futures)
    - Validate every upstream payload against its schema
    - Fall back in strict priority order, then to static or synthetic data

Every acquirer returns a value; upstream failures never propagate.
"""

from btcpulse.services.sources.chain import (
    SourceAttempt,
    SourceChain,
    SourceResult,
    Ok,
    Failed,
)
from btcpulse.services.sources.http import HttpJsonClient
from btcpulse.services.sources.price import PriceAcquirer, PriceQuote
from btcpulse.services.sources.history import (
    HistoryAcquirer,
    PriceHistory,
    synthesize_history,
)
from btcpulse.services.sources.derivatives import DerivativesAcquirer, DerivativesStats

__all__ = [
    "SourceAttempt",
    "SourceChain",
    "SourceResult",
    "Ok",
    "Failed",
    "HttpJsonClient",
    "PriceAcquirer",
    "PriceQuote",
    "HistoryAcquirer",
    "PriceHistory",
    "synthesize_history",
    "DerivativesAcquirer",
    "DerivativesStats",
]
