"""
BTC Pulse Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from btcpulse.core.config import settings
from btcpulse.api.v1 import router as api_v1_router
from btcpulse.api.v1.endpoints.market import get_btc_snapshot

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Source timeout: {settings.source_timeout_seconds}s")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    BTC Pulse Market Snapshot API

    ## Architecture
    - **Sources**: Pyth / Coinbase price, Binance / CoinGecko candles, Bybit / Binance futures derivatives
    - **Indicator Engine**: EMA, RSI, MACD, ATR (pure Python/NumPy)
    - **Fallbacks**: static price, synthetic history, default stats

    ## Core Principles
    - Always answer: degraded data beats no data
    - `data_source` says whether indicators come from real or synthetic history
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Wildcard origins cannot be combined with credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")

# Path used by the existing dashboard
app.add_api_route("/fetch-btc-data", get_btc_snapshot, methods=["GET", "POST"], tags=["Market Data"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "BTC Pulse Backend API",
        "docs": "/docs",
        "health": "/health",
        "snapshot": "/api/v1/market/btc",
    }
