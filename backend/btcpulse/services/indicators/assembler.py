"""
Indicator Assembler

Turns a (real or synthetic) price history plus the live price into the
current indicator values, the 10-point intraday series and volume stats.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from btcpulse.core.defaults import FALLBACK_VALUES, INTRADAY_LENGTH
from btcpulse.services.indicators.calculations import ema, rsi, macd, atr
from btcpulse.services.sources.history import PriceHistory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Current indicator values."""

    ema20: float
    macd: float
    rsi7: float
    rsi14: float
    atr14: float
    ema50: float


@dataclass(frozen=True)
class IndicatorSeries:
    """Growing-window indicators over the intraday window."""

    prices: tuple[float, ...]
    ema20: tuple[float, ...]
    macd: tuple[float, ...]
    rsi7: tuple[float, ...]
    rsi14: tuple[float, ...]


@dataclass(frozen=True)
class VolumeStats:
    current_volume: float
    average_volume: float


@dataclass(frozen=True)
class AssembledIndicators:
    snapshot: IndicatorSnapshot
    series: IndicatorSeries
    volume: VolumeStats


def current_indicators(
    closes: Sequence[float], highs: Sequence[float], lows: Sequence[float]
) -> IndicatorSnapshot:
    """
    Current values over fixed trailing windows.

    RSI windows are period + 1 closes (period deltas).
    """
    return IndicatorSnapshot(
        ema20=ema(closes[-20:], 20),
        macd=macd(closes[-26:]),
        rsi7=rsi(closes[-8:], 7),
        rsi14=rsi(closes[-15:], 14),
        atr14=atr(highs[-15:], lows[-15:], closes[-15:], 14),
        ema50=ema(closes[-50:], 50),
    )


def intraday_window(
    closes: Sequence[float], current_price: float, length: int = INTRADAY_LENGTH
) -> list[float]:
    """
    Last `length` closes with the final one replaced by the live price.

    Shorter histories are left-padded with their first close.
    """
    window = list(closes[-length:])
    if len(window) < length:
        window = [window[0]] * (length - len(window)) + window
    window[-1] = current_price
    return window


def growing_window_series(window: Sequence[float]) -> IndicatorSeries:
    """
    Indicators at each position i over the prefix window[0..i].

    Period clamping:
        EMA20: min(20, i + 1)  -> index 0 is window[0]
        RSI:   min(nominal, i) -> index 0 has period 0 and is neutral 50
        MACD:  prefix is always shorter than 26, so 0
    """
    ema20, macd_values, rsi7, rsi14 = [], [], [], []
    for i in range(len(window)):
        prefix = window[: i + 1]
        ema20.append(ema(prefix, min(20, i + 1)))
        macd_values.append(macd(prefix))
        rsi7.append(rsi(prefix, min(7, i)))
        rsi14.append(rsi(prefix, min(14, i)))

    return IndicatorSeries(
        prices=tuple(float(p) for p in window),
        ema20=tuple(ema20),
        macd=tuple(macd_values),
        rsi7=tuple(rsi7),
        rsi14=tuple(rsi14),
    )


def volume_stats(volumes: Optional[Sequence[float]]) -> VolumeStats:
    """Last volume and mean volume; table defaults without real volumes."""
    if not volumes:
        return VolumeStats(
            current_volume=FALLBACK_VALUES["current_volume"],
            average_volume=FALLBACK_VALUES["average_volume"],
        )
    return VolumeStats(
        current_volume=float(volumes[-1]),
        average_volume=float(np.mean(volumes)),
    )


class IndicatorAssembler:
    """Combines history, live price and indicator math."""

    def assemble(self, history: PriceHistory, current_price: float) -> AssembledIndicators:
        snapshot = current_indicators(history.closes, history.highs, history.lows)
        series = growing_window_series(intraday_window(history.closes, current_price))
        volume = volume_stats(history.volumes)

        logger.info(
            f"Indicators from {history.source} ({len(history.closes)} closes): "
            f"EMA20={snapshot.ema20:.2f} RSI14={snapshot.rsi14:.2f} MACD={snapshot.macd:.2f}"
        )
        return AssembledIndicators(snapshot=snapshot, series=series, volume=volume)
