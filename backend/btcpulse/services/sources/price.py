"""
Price Acquirer

Live BTC/USD price from:
1. Pyth Network Hermes (oracle, fixed-point mantissa + exponent)
2. Coinbase spot price
Fallback: static price from the defaults table.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal

from btcpulse.core.config import Settings
from btcpulse.core.defaults import FALLBACK_VALUES
from btcpulse.schemas.upstream import PYTH_FEEDS, CoinbaseSpot
from btcpulse.services.base import MalformedResponse
from btcpulse.services.sources.chain import Ok, SourceAttempt, SourceChain
from btcpulse.services.sources.http import HttpJsonClient, parse_payload

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"


@dataclass(frozen=True)
class PriceQuote:
    value: float
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE


def descale_price(mantissa: int, expo: int) -> float:
    """mantissa * 10 ** expo, exact in decimal before converting to float."""
    return float(Decimal(mantissa).scaleb(expo))


def is_valid_price(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


class PriceAcquirer:
    """Resolves one current price; never fails."""

    def __init__(self, client: HttpJsonClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def fetch_pyth(self) -> float:
        url = f"{self.settings.pyth_base_url}/api/latest_price_feeds"
        payload = await self.client.get_json(
            url, params={"ids[]": self.settings.pyth_btc_price_id}
        )
        feeds = parse_payload(PYTH_FEEDS, payload, "pyth")
        feed = feeds[0]
        price = descale_price(feed.price.price, feed.price.expo)
        logger.debug(f"Pyth mantissa={feed.price.price} expo={feed.price.expo} -> {price}")
        return price

    async def fetch_coinbase(self) -> float:
        url = f"{self.settings.coinbase_base_url}/v2/prices/{self.settings.coinbase_pair}/spot"
        payload = await self.client.get_json(url)
        spot = parse_payload(CoinbaseSpot, payload, "coinbase")
        if spot.data.currency.upper() != "USD":
            raise MalformedResponse("coinbase", f"Unexpected currency {spot.data.currency}")
        return spot.data.amount

    def chain(self) -> SourceChain[float]:
        return SourceChain(
            "price",
            [
                SourceAttempt("pyth", self.fetch_pyth),
                SourceAttempt("coinbase", self.fetch_coinbase),
            ],
            validator=is_valid_price,
            timeout=self.settings.source_timeout_seconds,
        )

    async def acquire(self) -> PriceQuote:
        result = await self.chain().run()
        if isinstance(result, Ok):
            logger.info(f"BTC price {result.value:.2f} from {result.source}")
            return PriceQuote(value=result.value, source=result.source)

        fallback = FALLBACK_VALUES["current_price"]
        logger.warning(f"Using fallback price {fallback}: {result.reason}")
        return PriceQuote(value=fallback, source=FALLBACK_SOURCE)
