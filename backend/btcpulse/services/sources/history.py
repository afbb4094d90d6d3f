"""
History Acquirer

Recent BTC closes (plus highs/lows where available) from:
1. Binance spot klines (OHLCV tuples)
2. CoinGecko market chart ([time, price] pairs; closes and optional volumes)
Fallback: a synthetic trend-plus-noise series anchored to the live price.

The synthetic series is flagged with source "synthetic" so consumers can
tell real indicators from made-up ones.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from btcpulse.core.config import Settings
from btcpulse.schemas.snapshot import DataSource
from btcpulse.schemas.upstream import (
    BINANCE_KLINES,
    KLINE_CLOSE,
    KLINE_HIGH,
    KLINE_LOW,
    KLINE_VOLUME,
    CHART_POINTS,
    CoinGeckoMarketChart,
)
from btcpulse.services.base import InsufficientData, MalformedResponse
from btcpulse.services.sources.chain import Ok, SourceAttempt, SourceChain, SourceResult
from btcpulse.services.sources.http import HttpJsonClient, parse_payload

logger = logging.getLogger(__name__)

# Highs/lows estimated as close +/- this fraction when a source has no extremes
ESTIMATED_RANGE_RATIO = 0.005

SYNTHETIC_START_RATIO_BOUNDS = (0.85, 0.98)
SYNTHETIC_MAX_NOISE_RATIO = 0.02

BINANCE_MAX_LIMIT = 1000


@dataclass(frozen=True)
class PriceHistory:
    """Parallel close/high/low series, oldest first."""

    closes: tuple[float, ...]
    highs: tuple[float, ...]
    lows: tuple[float, ...]
    source: DataSource
    volumes: Optional[tuple[float, ...]] = None
    extremes_estimated: bool = False

    @property
    def is_synthetic(self) -> bool:
        return self.source == DataSource.SYNTHETIC

    def __len__(self) -> int:
        return len(self.closes)


def estimate_extremes(closes: Sequence[float]) -> tuple[tuple[float, ...], tuple[float, ...]]:
    """Estimated (not real) highs and lows around each close."""
    highs = tuple(c * (1 + ESTIMATED_RANGE_RATIO) for c in closes)
    lows = tuple(c * (1 - ESTIMATED_RANGE_RATIO) for c in closes)
    return highs, lows


def synthesize_history(
    current_price: float,
    length: int,
    start_ratio: float = 0.92,
    noise_ratio: float = 0.02,
    seed: Optional[int] = 42,
) -> PriceHistory:
    """
    Linear ramp from start_ratio * price up to price, plus bounded noise.

    The last close is always exactly current_price. With a fixed seed the
    series is reproducible.
    """
    if length < 1:
        raise InsufficientData("HistoryAcquirer", f"Cannot synthesize {length} points")

    low, high = SYNTHETIC_START_RATIO_BOUNDS
    start = current_price * min(max(start_ratio, low), high)
    noise_bound = current_price * min(max(noise_ratio, 0.0), SYNTHETIC_MAX_NOISE_RATIO)
    rng = random.Random(seed)

    closes = []
    for i in range(length):
        progress = i / (length - 1) if length > 1 else 1.0
        trend = start + (current_price - start) * progress
        closes.append(trend + rng.uniform(-noise_bound, noise_bound))
    closes[-1] = current_price

    highs, lows = estimate_extremes(closes)
    return PriceHistory(
        closes=tuple(closes),
        highs=highs,
        lows=lows,
        source=DataSource.SYNTHETIC,
        extremes_estimated=True,
    )


def is_usable_history(history: PriceHistory) -> bool:
    return len(history) > 0 and all(c > 0 for c in history.closes)


class HistoryAcquirer:
    """Resolves a non-empty price history; never fails."""

    def __init__(self, client: HttpJsonClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def fetch_binance(self, length: int) -> PriceHistory:
        url = f"{self.settings.binance_base_url}/api/v3/klines"
        payload = await self.client.get_json(
            url,
            params={
                "symbol": self.settings.binance_symbol,
                "interval": self.settings.binance_interval,
                "limit": min(length, BINANCE_MAX_LIMIT),
            },
        )
        klines = sorted(parse_payload(BINANCE_KLINES, payload, "binance"), key=lambda k: k[0])

        return PriceHistory(
            closes=tuple(k[KLINE_CLOSE] for k in klines),
            highs=tuple(k[KLINE_HIGH] for k in klines),
            lows=tuple(k[KLINE_LOW] for k in klines),
            volumes=tuple(k[KLINE_VOLUME] for k in klines),
            source=DataSource.BINANCE,
        )

    async def fetch_coingecko(self, length: int) -> PriceHistory:
        url = (
            f"{self.settings.coingecko_base_url}/coins/"
            f"{self.settings.coingecko_coin_id}/market_chart"
        )
        headers = None
        if self.settings.coingecko_api_key:
            headers = {"x-cg-demo-api-key": self.settings.coingecko_api_key}
        payload = await self.client.get_json(
            url,
            params={"vs_currency": "usd", "days": self.settings.coingecko_days},
            headers=headers,
        )
        chart = parse_payload(CoinGeckoMarketChart, payload, "coingecko")
        points = sorted(chart.prices, key=lambda p: p[0])[-length:]
        closes = tuple(p[1] for p in points)
        if any(c <= 0 for c in closes):
            raise MalformedResponse("coingecko", "Non-positive price in chart")

        highs, lows = estimate_extremes(closes)
        return PriceHistory(
            closes=closes,
            highs=highs,
            lows=lows,
            source=DataSource.COINGECKO,
            volumes=self._coingecko_volumes(chart.total_volumes, len(closes)),
            extremes_estimated=True,
        )

    @staticmethod
    def _coingecko_volumes(raw: Any, count: int) -> Optional[tuple[float, ...]]:
        """Volumes aligned with the closes, or None when absent or malformed."""
        if not raw:
            return None
        try:
            points = CHART_POINTS.validate_python(raw)
        except ValidationError as e:
            logger.debug(f"Ignoring malformed CoinGecko volumes ({e.error_count()} errors)")
            return None

        volumes = tuple(p[1] for p in sorted(points, key=lambda p: p[0])[-count:])
        if len(volumes) != count or any(v < 0 for v in volumes):
            logger.debug(f"Ignoring CoinGecko volumes: {len(volumes)} points for {count} closes")
            return None
        return volumes

    def chain(self, length: int) -> SourceChain[PriceHistory]:
        return SourceChain(
            "history",
            [
                SourceAttempt("binance", lambda: self.fetch_binance(length)),
                SourceAttempt("coingecko", lambda: self.fetch_coingecko(length)),
            ],
            validator=is_usable_history,
            timeout=self.settings.source_timeout_seconds,
        )

    async def fetch_real(self, length: Optional[int] = None) -> SourceResult[PriceHistory]:
        """Real sources only; independent of the live price."""
        return await self.chain(length or self.settings.history_length).run()

    def synthesize(self, current_price: float, length: Optional[int] = None) -> PriceHistory:
        length = length or self.settings.history_length
        logger.warning(
            f"All history sources failed; synthesizing {length} points "
            f"anchored at {current_price:.2f}"
        )
        return synthesize_history(
            current_price,
            length,
            start_ratio=self.settings.synthetic_start_ratio,
            noise_ratio=self.settings.synthetic_noise_ratio,
            seed=self.settings.synthetic_seed,
        )

    def resolve(
        self,
        result: SourceResult[PriceHistory],
        current_price: float,
        length: Optional[int] = None,
    ) -> PriceHistory:
        """Real history if the chain succeeded, else a synthetic series."""
        if isinstance(result, Ok):
            return result.value
        return self.synthesize(current_price, length)

    async def acquire(self, current_price: float, length: Optional[int] = None) -> PriceHistory:
        result = await self.fetch_real(length)
        return self.resolve(result, current_price, length)
