"""
Technical Indicator Calculations

Pure Python/NumPy implementations of technical indicators.
All math is deterministic and returns a single current value.

Short input never raises: each function falls back to a neutral value
(documented per function) so a snapshot can always be produced.
Empty input is a caller bug and raises InsufficientData.
"""

from typing import Optional, Sequence

import numpy as np

from btcpulse.services.base import InsufficientData

RSI_NEUTRAL = 50.0
RSI_MAX = 100.0
MACD_NEUTRAL = 0.0
ATR_NEUTRAL = 0.0

MACD_FAST = 12
MACD_SLOW = 26


def _as_array(data: Sequence[float], name: str = "series") -> np.ndarray:
    arr = np.asarray(data, dtype=float)
    if arr.size == 0:
        raise InsufficientData("IndicatorMath", f"{name} is empty")
    return arr


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def ema(
    data: Sequence[float], period: int, default: Optional[float] = None
) -> float:
    """
    Exponential Moving Average, seeded with the first element.

    ema = price * k + ema * (1 - k), k = 2 / (period + 1)

    Fewer than `period` points: returns `default` if given, else the last
    element.
    """
    prices = _as_array(data)
    if len(prices) < period:
        return float(default) if default is not None else float(prices[-1])

    k = 2 / (period + 1)
    value = prices[0]
    for price in prices[1:]:
        value = price * k + value * (1 - k)
    return float(value)


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Relative Strength Index over the first `period` deltas.

    Returns 50 (neutral) when there are not more than `period` points or
    when period < 1, and 100 when there are no losses.
    """
    prices = _as_array(closes)
    if period < 1 or len(prices) <= period:
        return RSI_NEUTRAL

    deltas = np.diff(prices[: period + 1])
    gains = np.where(deltas > 0, deltas, 0.0).sum()
    losses = np.where(deltas < 0, -deltas, 0.0).sum()

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return RSI_MAX

    rs = avg_gain / avg_loss
    return float(100 - (100 / (1 + rs)))


def macd(closes: Sequence[float]) -> float:
    """
    MACD line: EMA12 of the last 12 closes minus EMA26 of the last 26.

    Fewer than 26 points returns 0 (no divergence detectable).
    """
    prices = _as_array(closes)
    if len(prices) < MACD_SLOW:
        return MACD_NEUTRAL

    fast = ema(prices[-MACD_FAST:], MACD_FAST)
    slow = ema(prices[-MACD_SLOW:], MACD_SLOW)
    return fast - slow


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(high: float, low: float, prev_close: float) -> float:
    """Largest of the bar range and the gaps from the previous close."""
    return max(high - low, abs(high - prev_close), abs(low - prev_close))


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """
    Average True Range: mean true range over bars 1..period.

    Fewer than period + 1 bars returns 0 (no volatility estimate).
    """
    h = _as_array(highs, "highs")
    l = _as_array(lows, "lows")
    c = _as_array(closes, "closes")
    if not (len(h) == len(l) == len(c)):
        raise InsufficientData(
            "IndicatorMath",
            "highs, lows and closes must have the same length",
            {"highs": len(h), "lows": len(l), "closes": len(c)},
        )
    if period < 1 or len(c) < period + 1:
        return ATR_NEUTRAL

    ranges = [true_range(h[i], l[i], c[i - 1]) for i in range(1, period + 1)]
    return float(np.mean(ranges))
