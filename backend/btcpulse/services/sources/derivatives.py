"""
Derivatives Acquirer

BTC perpetual open interest and funding rate from:
1. Bybit v5 linear ticker
2. Binance USD-M futures (premium index + open interest)
Fallback: static values from the defaults table.
"""

import logging
import math
from dataclasses import dataclass

from btcpulse.core.config import Settings
from btcpulse.core.defaults import FALLBACK_VALUES
from btcpulse.schemas.upstream import (
    BybitTickerResponse,
    BinancePremiumIndex,
    BinanceOpenInterest,
)
from btcpulse.services.base import SourceUnavailable
from btcpulse.services.sources.chain import Ok, SourceAttempt, SourceChain
from btcpulse.services.sources.http import HttpJsonClient, parse_payload

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"


@dataclass(frozen=True)
class DerivativesStats:
    open_interest: float
    funding_rate: float
    source: str


def is_valid_stats(stats: DerivativesStats) -> bool:
    return (
        math.isfinite(stats.open_interest)
        and stats.open_interest > 0
        and math.isfinite(stats.funding_rate)
    )


class DerivativesAcquirer:
    """Resolves open interest and funding rate; never fails."""

    def __init__(self, client: HttpJsonClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def fetch_bybit(self) -> DerivativesStats:
        url = f"{self.settings.bybit_base_url}/v5/market/tickers"
        payload = await self.client.get_json(
            url, params={"category": "linear", "symbol": self.settings.bybit_symbol}
        )
        response = parse_payload(BybitTickerResponse, payload, "bybit")
        if response.ret_code != 0:
            raise SourceUnavailable("bybit", f"retCode {response.ret_code}")

        ticker = response.result.tickers[0]
        return DerivativesStats(
            open_interest=ticker.open_interest,
            funding_rate=ticker.funding_rate,
            source="bybit",
        )

    async def fetch_binance_futures(self) -> DerivativesStats:
        base = self.settings.binance_futures_base_url
        params = {"symbol": self.settings.binance_symbol}

        premium = parse_payload(
            BinancePremiumIndex,
            await self.client.get_json(f"{base}/fapi/v1/premiumIndex", params=params),
            "binance_futures",
        )
        oi = parse_payload(
            BinanceOpenInterest,
            await self.client.get_json(f"{base}/fapi/v1/openInterest", params=params),
            "binance_futures",
        )
        return DerivativesStats(
            open_interest=oi.open_interest,
            funding_rate=premium.last_funding_rate,
            source="binance_futures",
        )

    def chain(self) -> SourceChain[DerivativesStats]:
        return SourceChain(
            "derivatives",
            [
                SourceAttempt("bybit", self.fetch_bybit),
                SourceAttempt("binance_futures", self.fetch_binance_futures, optional=True),
            ],
            validator=is_valid_stats,
            timeout=self.settings.source_timeout_seconds,
        )

    async def acquire(self) -> DerivativesStats:
        result = await self.chain().run()
        if isinstance(result, Ok):
            return result.value

        logger.warning(f"Using fallback open interest/funding: {result.reason}")
        return DerivativesStats(
            open_interest=FALLBACK_VALUES["open_interest"],
            funding_rate=FALLBACK_VALUES["funding_rate"],
            source=FALLBACK_SOURCE,
        )
