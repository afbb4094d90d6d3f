"""
Source chain and acquirer tests (no network: FakeJsonClient).
Run with: pytest backend/test_sources.py
"""

import asyncio

import pytest

from btcpulse.core.defaults import FALLBACK_VALUES
from btcpulse.schemas.snapshot import DataSource
from btcpulse.services.base import MalformedResponse, SourceUnavailable
from btcpulse.services.sources.chain import Failed, Ok, SourceAttempt, SourceChain
from btcpulse.services.sources.derivatives import DerivativesAcquirer
from btcpulse.services.sources.history import (
    ESTIMATED_RANGE_RATIO,
    HistoryAcquirer,
    synthesize_history,
)
from btcpulse.services.sources.price import PriceAcquirer, descale_price

from conftest import (
    BINANCE_KLINES_URL,
    BINANCE_OI_URL,
    BINANCE_PREMIUM_URL,
    BYBIT_URL,
    COINBASE_URL,
    COINGECKO_URL,
    PYTH_URL,
    make_klines,
)


def _value(v):
    async def fetch():
        return v
    return fetch


def _raise(exc):
    async def fetch():
        raise exc
    return fetch


# =============================================================================
# SOURCE CHAIN
# =============================================================================


def test_chain_first_valid_wins_and_short_circuits():
    called = []

    async def second():
        called.append("second")
        return 2

    chain = SourceChain("t", [SourceAttempt("first", _value(1)), SourceAttempt("second", second)])
    result = asyncio.run(chain.run())

    assert result == Ok(value=1, source="first")
    assert called == []


def test_chain_skips_errors_and_invalid_values():
    chain = SourceChain(
        "t",
        [
            SourceAttempt("down", _raise(SourceUnavailable("down", "HTTP 502"))),
            SourceAttempt("broken", _raise(RuntimeError("boom"))),
            SourceAttempt("negative", _value(-5)),
            SourceAttempt("good", _value(7)),
        ],
        validator=lambda v: v > 0,
    )
    result = asyncio.run(chain.run())

    assert isinstance(result, Ok)
    assert result.value == 7
    assert result.source == "good"


def test_chain_exhaustion_reports_every_attempt():
    chain = SourceChain(
        "t",
        [
            SourceAttempt("a", _raise(SourceUnavailable("a", "HTTP 500"))),
            SourceAttempt("b", _raise(MalformedResponse("b", "bad shape"))),
        ],
    )
    result = asyncio.run(chain.run())

    assert isinstance(result, Failed)
    assert result.attempts == {"a": "HTTP 500", "b": "bad shape"}


def test_chain_timeout_is_an_ordinary_failure():
    async def slow():
        await asyncio.sleep(5)
        return 1

    chain = SourceChain(
        "t",
        [SourceAttempt("slow", slow), SourceAttempt("fast", _value(2))],
        timeout=0.05,
    )
    result = asyncio.run(chain.run())

    assert result == Ok(value=2, source="fast")


# =============================================================================
# PRICE
# =============================================================================


def test_descale_price():
    assert descale_price(1083185, -1) == 108318.5
    assert descale_price(10831850000000, -8) == 108318.5
    assert descale_price(5, 2) == 500.0


def test_price_from_pyth(make_client, settings, pyth_payload):
    client = make_client({PYTH_URL: pyth_payload})
    quote = asyncio.run(PriceAcquirer(client, settings).acquire())

    assert quote.value == 108318.5
    assert quote.source == "pyth"
    assert not quote.is_fallback


def test_price_falls_back_to_coinbase(make_client, settings):
    client = make_client({
        PYTH_URL: [],
        COINBASE_URL: {"data": {"amount": "65000.12", "base": "BTC", "currency": "USD"}},
    })
    quote = asyncio.run(PriceAcquirer(client, settings).acquire())

    assert quote.value == 65000.12
    assert quote.source == "coinbase"


def test_price_rejects_non_positive_oracle_price(make_client, settings):
    client = make_client({
        PYTH_URL: [{"id": "x", "price": {"price": "-1", "expo": 0}}],
        COINBASE_URL: {"data": {"amount": "64000", "currency": "USD"}},
    })
    quote = asyncio.run(PriceAcquirer(client, settings).acquire())

    assert quote.source == "coinbase"


def test_price_static_fallback(make_client, settings):
    quote = asyncio.run(PriceAcquirer(make_client(), settings).acquire())

    assert quote.value == FALLBACK_VALUES["current_price"]
    assert quote.is_fallback


# =============================================================================
# HISTORY
# =============================================================================


def test_history_from_binance_sorted_oldest_first(make_client, settings):
    closes = [100.0 + i for i in range(30)]
    client = make_client({BINANCE_KLINES_URL: list(reversed(make_klines(closes)))})
    result = asyncio.run(HistoryAcquirer(client, settings).fetch_real(30))

    assert isinstance(result, Ok)
    history = result.value
    assert history.source == DataSource.BINANCE
    assert list(history.closes) == closes
    assert history.highs[0] == 105.0
    assert history.lows[0] == 95.0
    assert history.volumes[-1] == pytest.approx(39.0)
    assert not history.extremes_estimated


@pytest.mark.parametrize("bad_payload", [
    [],
    {"code": -1121, "msg": "Invalid symbol."},
    [[1, "2", "3"]],
    [["a", "b", "c", "d", "e", "f"]],
])
def test_history_malformed_binance_moves_to_coingecko(make_client, settings, bad_payload):
    client = make_client({
        BINANCE_KLINES_URL: bad_payload,
        COINGECKO_URL: {"prices": [[2, 101.0], [1, 100.0], [3, 102.0]]},
    })
    history = asyncio.run(HistoryAcquirer(client, settings).acquire(50_000.0))

    assert history.source == DataSource.COINGECKO
    assert history.closes == (100.0, 101.0, 102.0)
    assert history.extremes_estimated
    assert history.highs[0] == pytest.approx(100.0 * (1 + ESTIMATED_RANGE_RATIO))
    assert history.lows[0] == pytest.approx(100.0 * (1 - ESTIMATED_RANGE_RATIO))
    assert history.volumes is None


def test_coingecko_rejects_wrong_arity(make_client, settings):
    client = make_client({COINGECKO_URL: {"prices": [[1, 100.0, 5.0]]}})
    result = asyncio.run(HistoryAcquirer(client, settings).fetch_real(10))

    assert isinstance(result, Failed)
    assert set(result.attempts) == {"binance", "coingecko"}


def test_history_binance_zero_close_moves_to_coingecko(make_client, settings):
    client = make_client({
        BINANCE_KLINES_URL: make_klines([100.0, 0.0, 102.0]),
        COINGECKO_URL: {"prices": [[1, 100.0], [2, 101.0]]},
    })
    result = asyncio.run(HistoryAcquirer(client, settings).fetch_real(50))

    assert isinstance(result, Ok)
    assert result.source == "coingecko"
    assert result.value.closes == (100.0, 101.0)


def test_coingecko_volumes_aligned_with_closes(make_client, settings):
    client = make_client({
        BINANCE_KLINES_URL: [],
        COINGECKO_URL: {
            "prices": [[2, 101.0], [1, 100.0]],
            "total_volumes": [[2, 7.0], [1, 5.0]],
        },
    })
    history = asyncio.run(HistoryAcquirer(client, settings).acquire(100.0, 2))

    assert history.source == DataSource.COINGECKO
    assert history.volumes == (5.0, 7.0)


@pytest.mark.parametrize("bad_volumes", [
    [[1, "x"], [2, 7.0]],
    [[1, 5.0, 9.0], [2, 7.0]],
    [[2, 7.0]],
    "not a list",
])
def test_coingecko_malformed_volumes_keep_closes(make_client, settings, bad_volumes):
    client = make_client({
        COINGECKO_URL: {"prices": [[1, 100.0], [2, 101.0]], "total_volumes": bad_volumes},
    })
    history = asyncio.run(HistoryAcquirer(client, settings).acquire(100.0, 2))

    assert history.source == DataSource.COINGECKO
    assert history.closes == (100.0, 101.0)
    assert history.volumes is None


def test_history_synthetic_when_all_sources_fail(make_client, settings):
    history = asyncio.run(HistoryAcquirer(make_client(), settings).acquire(108318.5, 100))

    assert history.is_synthetic
    assert len(history) == 100
    assert history.closes[-1] == 108318.5
    assert history.extremes_estimated


def test_synthetic_series_properties():
    price = 60_000.0
    history = synthesize_history(price, 50, start_ratio=0.9, noise_ratio=0.02, seed=7)

    assert len(history.closes) == len(history.highs) == len(history.lows) == 50
    assert history.closes[-1] == price
    # Trend from 0.9 * price with at most 2% noise either way
    assert history.closes[0] == pytest.approx(0.9 * price, abs=0.02 * price)
    assert all(0.88 * price <= c <= 1.02 * price for c in history.closes)
    # Same seed, same series
    assert synthesize_history(price, 50, 0.9, 0.02, seed=7) == history


def test_synthetic_clamps_tuning():
    price = 100.0
    history = synthesize_history(price, 2, start_ratio=0.1, noise_ratio=0.0)
    assert history.closes == (85.0, 100.0)


def test_synthetic_single_point():
    assert synthesize_history(123.0, 1).closes == (123.0,)


# =============================================================================
# DERIVATIVES
# =============================================================================


def test_derivatives_from_bybit(make_client, settings, bybit_payload):
    client = make_client({BYBIT_URL: bybit_payload})
    stats = asyncio.run(DerivativesAcquirer(client, settings).acquire())

    assert stats.open_interest == 52000.5
    assert stats.funding_rate == 0.0001
    assert stats.source == "bybit"


def test_derivatives_bybit_error_code_uses_binance_futures(make_client, settings, bybit_payload):
    bybit_payload["retCode"] = 10001
    client = make_client({
        BYBIT_URL: bybit_payload,
        BINANCE_PREMIUM_URL: {"symbol": "BTCUSDT", "markPrice": "108300", "lastFundingRate": "0.00005"},
        BINANCE_OI_URL: {"symbol": "BTCUSDT", "openInterest": "80000.1", "time": 1},
    })
    stats = asyncio.run(DerivativesAcquirer(client, settings).acquire())

    assert stats.source == "binance_futures"
    assert stats.open_interest == 80000.1
    assert stats.funding_rate == 0.00005


def test_derivatives_defaults(make_client, settings):
    stats = asyncio.run(DerivativesAcquirer(make_client(), settings).acquire())

    assert stats.source == "fallback"
    assert stats.open_interest == FALLBACK_VALUES["open_interest"]
    assert stats.funding_rate == FALLBACK_VALUES["funding_rate"]
