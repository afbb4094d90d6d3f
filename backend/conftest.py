"""
Shared test fixtures: an in-memory stand-in for HttpJsonClient.
"""

import pytest

from btcpulse.core.config import Settings
from btcpulse.services.base import SourceUnavailable

PYTH_URL = "hermes.pyth.network/api/latest_price_feeds"
COINBASE_URL = "api.coinbase.com/v2/prices"
BINANCE_KLINES_URL = "api.binance.com/api/v3/klines"
COINGECKO_URL = "api.coingecko.com/api/v3/coins/bitcoin/market_chart"
BYBIT_URL = "api.bybit.com/v5/market/tickers"
BINANCE_PREMIUM_URL = "fapi.binance.com/fapi/v1/premiumIndex"
BINANCE_OI_URL = "fapi.binance.com/fapi/v1/openInterest"


class FakeJsonClient:
    """Routes by URL fragment; exceptions in the route table are raised."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def get_json(self, url, params=None, headers=None):
        self.calls.append(url)
        for fragment, response in self.routes.items():
            if fragment in url:
                if isinstance(response, Exception):
                    raise response
                return response
        raise SourceUnavailable(url, "HTTP 503", {"status": 503})


def make_klines(closes, start_ms=1_700_000_000_000, step_ms=3_600_000):
    """Binance-style kline rows (strings for prices, like the real API)."""
    rows = []
    for i, close in enumerate(closes):
        open_time = start_ms + i * step_ms
        rows.append([
            open_time,
            f"{close - 1:.2f}",
            f"{close + 5:.2f}",
            f"{close - 5:.2f}",
            f"{close:.2f}",
            f"{10 + i:.3f}",
            open_time + step_ms - 1,
            "1000.0",
            42,
            "5.0",
            "500.0",
            "0",
        ])
    return rows


@pytest.fixture
def settings():
    return Settings(source_timeout_seconds=1.0, history_length=100)


@pytest.fixture
def make_client():
    return FakeJsonClient


@pytest.fixture
def pyth_payload():
    return [{
        "id": "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43",
        "price": {
            "price": "1083185",
            "conf": "120",
            "expo": -1,
            "publish_time": 1_760_000_000,
        },
    }]


@pytest.fixture
def bybit_payload():
    return {
        "retCode": 0,
        "retMsg": "OK",
        "result": {
            "category": "linear",
            "list": [{
                "symbol": "BTCUSDT",
                "lastPrice": "108300.00",
                "openInterest": "52000.5",
                "fundingRate": "0.0001",
            }],
        },
    }
