"""
Indicator Engine

CONTRACT:
    Input:  PriceHistory (real or synthetic) + live price
    Output: IndicatorSnapshot, IndicatorSeries, VolumeStats

RESPONSIBILITIES:
    - EMA, RSI, MACD, ATR on trailing windows
    - 10-point growing-window intraday series

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from btcpulse.services.indicators.assembler import (
    IndicatorAssembler,
    IndicatorSnapshot,
    IndicatorSeries,
    VolumeStats,
    AssembledIndicators,
)

__all__ = [
    "IndicatorAssembler",
    "IndicatorSnapshot",
    "IndicatorSeries",
    "VolumeStats",
    "AssembledIndicators",
]
