"""
Market Data API Endpoints

BTC/USD snapshot for the dashboard.
"""

import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from btcpulse.schemas.snapshot import IndicatorPreview, MarketSnapshot
from btcpulse.services.base import InsufficientData
from btcpulse.services.indicators.calculations import ema, macd, rsi
from btcpulse.services.snapshot import get_snapshot_service

logger = logging.getLogger(__name__)

router = APIRouter()

RESPONSE_HEADERS = {"Access-Control-Allow-Origin": "*"}


@router.api_route(
    "/btc",
    methods=["GET", "POST"],
    response_model=MarketSnapshot,
    responses={500: {"description": "Unhandled pipeline error"}},
)
async def get_btc_snapshot():
    """
    Current BTC/USD price, indicators and derivatives stats.

    Always 200 when any data (real, fallback or synthetic) could be
    assembled; `data_source` tells which history was used.
    """
    service = get_snapshot_service()
    try:
        snapshot = await service.execute()
    except Exception:
        logger.exception("Snapshot pipeline failed")
        return JSONResponse(
            status_code=500,
            content={"error": "Function execution failed. Please check logs."},
            headers=RESPONSE_HEADERS,
        )

    return JSONResponse(content=snapshot.model_dump(mode="json"), headers=RESPONSE_HEADERS)


@router.get("/btc/indicators", response_model=IndicatorPreview)
async def preview_indicators(
    closes: str = Query(..., description="Comma-separated closes, oldest first"),
):
    """
    Indicator math on a caller-supplied close series (no upstream calls).
    """
    try:
        values = [float(c) for c in closes.split(",") if c.strip()]
        return IndicatorPreview(
            points=len(values),
            ema_20=ema(values, 20),
            ema_50=ema(values, 50),
            rsi_7=rsi(values[-8:], 7),
            rsi_14=rsi(values[-15:], 14),
            macd=macd(values[-26:]),
        )
    except ValueError:
        raise HTTPException(status_code=422, detail="closes must be numbers")
    except InsufficientData as e:
        raise HTTPException(status_code=422, detail=e.message)
