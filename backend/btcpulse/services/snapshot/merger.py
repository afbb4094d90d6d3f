"""
Snapshot Merger

Builds the final MarketSnapshot and substitutes fallbacks for values that
could not be computed.

Substitution rule: None and non-finite values are replaced by the field's
default from FALLBACK_VALUES / FALLBACK_SERIES. With legacy_falsy=True, zero
is replaced as well. That reproduces the old `value || default` behaviour,
which cannot tell a legitimate 0 (e.g. MACD on short data) from a failure.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional, Sequence

from btcpulse.core.defaults import FALLBACK_SERIES, FALLBACK_VALUES
from btcpulse.schemas.snapshot import MarketSnapshot
from btcpulse.services.indicators.assembler import AssembledIndicators
from btcpulse.services.sources.derivatives import DerivativesStats
from btcpulse.services.sources.history import PriceHistory
from btcpulse.services.sources.price import PriceQuote

logger = logging.getLogger(__name__)


class SnapshotMerger:
    """Applies the fallback policy and emits the immutable snapshot."""

    def __init__(self, legacy_falsy: bool = False):
        self.legacy_falsy = legacy_falsy
        self.substituted: list[str] = []

    def _needs_fallback(self, value: Optional[float]) -> bool:
        if value is None or not math.isfinite(value):
            return True
        return self.legacy_falsy and value == 0

    def value(self, field: str, value: Optional[float]) -> float:
        if self._needs_fallback(value):
            self.substituted.append(field)
            return FALLBACK_VALUES[field]
        return float(value)

    def series(self, field: str, values: Sequence[Optional[float]]) -> list[float]:
        defaults = FALLBACK_SERIES[field]
        out = []
        for i, v in enumerate(values):
            # Series keep legitimate zeros (intraday MACD is 0 by contract)
            if v is None or not math.isfinite(v):
                self.substituted.append(f"{field}[{i}]")
                out.append(defaults[i])
            else:
                out.append(float(v))
        return out

    def merge(
        self,
        price: PriceQuote,
        history: PriceHistory,
        indicators: AssembledIndicators,
        derivatives: DerivativesStats,
        timestamp: Optional[datetime] = None,
    ) -> MarketSnapshot:
        self.substituted = []
        current = indicators.snapshot
        series = indicators.series
        timestamp = timestamp or datetime.now(timezone.utc)

        snapshot = MarketSnapshot(
            current_price=self.value("current_price", price.value),
            current_ema20=self.value("current_ema20", current.ema20),
            current_macd=self.value("current_macd", current.macd),
            current_rsi_7=self.value("current_rsi_7", current.rsi7),
            current_rsi_14=self.value("current_rsi_14", current.rsi14),
            current_ema50=self.value("current_ema50", current.ema50),
            current_atr14=self.value("current_atr14", current.atr14),
            open_interest=self.value("open_interest", derivatives.open_interest),
            open_interest_avg=FALLBACK_VALUES["open_interest_avg"],
            funding_rate=self.value("funding_rate", derivatives.funding_rate),
            intraday_prices=self.series("intraday_prices", series.prices),
            intraday_ema20=self.series("intraday_ema20", series.ema20),
            intraday_macd=self.series("intraday_macd", series.macd),
            intraday_rsi_7=self.series("intraday_rsi_7", series.rsi7),
            intraday_rsi_14=self.series("intraday_rsi_14", series.rsi14),
            ema_20_4h=FALLBACK_VALUES["ema_20_4h"],
            ema_50_4h=FALLBACK_VALUES["ema_50_4h"],
            atr_3_4h=FALLBACK_VALUES["atr_3_4h"],
            atr_14_4h=FALLBACK_VALUES["atr_14_4h"],
            current_volume=self.value("current_volume", indicators.volume.current_volume),
            average_volume=self.value("average_volume", indicators.volume.average_volume),
            timestamp=timestamp.isoformat(),
            data_source=history.source,
        )

        if self.substituted:
            logger.info(f"Fallback values used for: {', '.join(self.substituted)}")
        return snapshot
