"""
Fallback Values

Canned values used when a field cannot be computed or fetched.
Keyed by output field name. Read-only.
"""

from types import MappingProxyType
from typing import Mapping

FALLBACK_VALUES: Mapping[str, float] = MappingProxyType({
    # Current values
    "current_price": 108318.5,
    "current_ema20": 108238.095,
    "current_macd": 140.779,
    "current_rsi_7": 50.202,
    "current_rsi_14": 55.032,
    "current_ema50": 108238.095,
    "current_atr14": 896.366,
    # Derivatives
    "open_interest": 26808.17,
    "open_interest_avg": 26944.93,
    "funding_rate": 0.0000125,
    # 4H timeframe (supplied, not computed)
    "ema_20_4h": 109085.4,
    "ema_50_4h": 110266.798,
    "atr_3_4h": 809.461,
    "atr_14_4h": 896.366,
    # Volume
    "current_volume": 151.082,
    "average_volume": 4897.702,
})

FALLBACK_SERIES: Mapping[str, tuple[float, ...]] = MappingProxyType({
    "intraday_prices": (
        108485.0, 108339.0, 108250.0, 108181.5, 108310.5,
        108288.5, 108446.0, 108403.0, 108396.5, 108318.5,
    ),
    "intraday_ema20": (
        108095.788, 108118.285, 108132.829, 108134.083, 108154.742,
        108165.719, 108193.746, 108211.484, 108230.105, 108238.095,
    ),
    "intraday_macd": (
        220.005, 210.655, 196.062, 172.423, 168.291,
        156.675, 160.944, 156.074, 152.633, 140.779,
    ),
    "intraday_rsi_7": (
        66.669, 55.61, 51.766, 44.426, 56.286,
        51.245, 60.843, 55.478, 56.972, 50.202,
    ),
    "intraday_rsi_14": (
        66.981, 60.079, 57.626, 52.862, 58.867,
        55.84, 60.917, 57.899, 58.644, 55.032,
    ),
})

INTRADAY_LENGTH = 10
