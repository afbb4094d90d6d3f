"""
Snapshot Service Implementation

One invocation = one pass through the pipeline:
    price + real history + derivatives (concurrently)
    -> synthetic history if needed (anchored to the price)
    -> indicators -> merged snapshot
"""

import asyncio
import logging
from typing import Optional

from btcpulse.core.config import Settings, settings as default_settings
from btcpulse.schemas.snapshot import MarketSnapshot, SnapshotRequest
from btcpulse.services.base import BaseService
from btcpulse.services.indicators.assembler import IndicatorAssembler
from btcpulse.services.snapshot.merger import SnapshotMerger
from btcpulse.services.sources.derivatives import DerivativesAcquirer
from btcpulse.services.sources.history import HistoryAcquirer
from btcpulse.services.sources.http import HttpJsonClient
from btcpulse.services.sources.price import PriceAcquirer

logger = logging.getLogger(__name__)


class SnapshotService(BaseService[SnapshotRequest, MarketSnapshot]):
    """
    BTC/USD Snapshot Service.

    Always returns a complete snapshot: every upstream failure degrades to
    a fallback (static price, synthetic history, default derivatives).
    """

    def __init__(self, settings: Optional[Settings] = None, client_factory=None):
        self.settings = settings or default_settings
        # Swappable for tests; must return an async context manager client
        self._client_factory = client_factory or (
            lambda: HttpJsonClient(timeout=self.settings.source_timeout_seconds)
        )
        self._assembler = IndicatorAssembler()

    @property
    def name(self) -> str:
        return "SnapshotService"

    async def execute(self, input_data: Optional[SnapshotRequest] = None) -> MarketSnapshot:
        request = input_data or SnapshotRequest(history_length=self.settings.history_length)
        length = request.history_length

        async with self._client_factory() as client:
            price_acquirer = PriceAcquirer(client, self.settings)
            history_acquirer = HistoryAcquirer(client, self.settings)
            derivatives_acquirer = DerivativesAcquirer(client, self.settings)

            # Real history does not depend on the price; only synthesis does
            price, history_result, derivatives = await asyncio.gather(
                price_acquirer.acquire(),
                history_acquirer.fetch_real(length),
                derivatives_acquirer.acquire(),
            )

        history = history_acquirer.resolve(history_result, price.value, length)
        indicators = self._assembler.assemble(history, price.value)

        merger = SnapshotMerger(legacy_falsy=self.settings.legacy_falsy_fallback)
        snapshot = merger.merge(price, history, indicators, derivatives)

        logger.info(
            f"Snapshot: price={snapshot.current_price:.2f} ({price.source}), "
            f"history={history.source.value}, derivatives={derivatives.source}"
        )
        return snapshot

    async def health_check(self) -> bool:
        """Pipeline degrades instead of failing, so it is always serviceable."""
        return True


# Singleton instance
_service_instance: Optional[SnapshotService] = None


def get_snapshot_service() -> SnapshotService:
    """Get or create snapshot service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = SnapshotService()
    return _service_instance
