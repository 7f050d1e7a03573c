"""
FastAPI Application - Multi-Venue Volume API

Serves the aggregated WOO X / Paradex trading volume to the chart UI.

Supported Venues:
    - WOO X
    - Paradex

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings, validate_configuration
from core.exceptions import VolumeError
from core.logging import logger
from core.schemas import PlatformVolume, VolumeQuery, VolumeResult
from core.volume_aggregator import FULL_HISTORY_WINDOW, RECENT_WINDOW, VolumeAggregator
from storage import create_stores


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and build the aggregator."""
    logger.info("=== Application Starting ===")
    validate_configuration()

    if getattr(app.state, "aggregator", None) is None:
        credential_store, snapshot_store = create_stores(settings)
        app.state.aggregator = VolumeAggregator(credential_store, snapshot_store, settings)

    logger.info("=== Started Successfully ===")

    yield

    logger.info("=== Shutdown Complete ===")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Multi-Venue Trading Volume API",
    description=(
        "Aggregated trading volume for WOO X and Paradex.\n\n"
        "Every figure carries a `source_tier`:\n"
        "- `authenticated` - from the account's own data\n"
        "- `public` - projected from public 24h market data (approximate)\n"
        "- `error` - placeholder, all data sources failed\n\n"
        "## REST Endpoints\n"
        "- `GET /volume` - Both venues, recent window (30 days) with history\n"
        "- `GET /volume/full-history` - Both venues, full-history window (730 days)\n"
        "- `GET /{exchange}/volume` - One venue, optional `start` / `end`\n"
        "- `GET /{exchange}/market-summary` - Public market data\n"
        "- `GET /exchanges` - List supported venues\n"
        "- `GET /health` - Health check\n"
    ),
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_aggregator(request: Request) -> VolumeAggregator:
    return request.app.state.aggregator


# ============================================
# System Endpoints
# ============================================

@app.get("/", tags=["System"])
async def root():
    """API information."""
    return {
        "name": "Multi-Venue Trading Volume API",
        "version": "1.0.0",
        "docs": "/docs",
        "windows": [RECENT_WINDOW, FULL_HISTORY_WINDOW],
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Service health (does not call the venues)."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "storage": "supabase" if settings.use_supabase else "in-memory",
    }


@app.get("/exchanges", tags=["System"])
async def list_exchanges(request: Request):
    """Supported venues."""
    aggregator = get_aggregator(request)
    return {"exchanges": aggregator.list_platforms(), "count": len(aggregator)}


# ============================================
# Volume Endpoints
# ============================================

@app.get("/volume", response_model=Dict[str, PlatformVolume], tags=["Volume"])
async def get_volume(request: Request):
    """
    Volume of every venue over the recent window, with stored history.

    Always answers 200; degraded venues are tagged `error`.
    """
    return await get_aggregator(request).aggregate(RECENT_WINDOW)


@app.get("/volume/full-history", response_model=Dict[str, PlatformVolume], tags=["Volume"])
async def get_volume_full_history(request: Request):
    """Volume of every venue over the full-history window, with stored history."""
    return await get_aggregator(request).aggregate(FULL_HISTORY_WINDOW)


@app.get("/{exchange}/volume", response_model=VolumeResult, tags=["Volume"])
async def get_exchange_volume(
    request: Request,
    exchange: str,
    start: Optional[datetime] = Query(default=None, description="Range start (ISO-8601, default now - 730d)"),
    end: Optional[datetime] = Query(default=None, description="Range end (ISO-8601, default now)")
):
    """One venue's volume over an arbitrary range (not persisted)."""
    aggregator = get_aggregator(request)
    exchange = exchange.lower()

    if not aggregator.has_platform(exchange):
        raise HTTPException(status_code=404, detail=f"Exchange '{exchange}' is not supported")

    try:
        query = VolumeQuery(start_time=start, end_time=end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid range: {e}")

    return await aggregator.fetch_platform_volume(exchange, query)


@app.get("/{exchange}/market-summary", tags=["Market Data"])
async def get_market_summary(request: Request, exchange: str):
    """Public market data straight from the venue."""
    aggregator = get_aggregator(request)
    exchange = exchange.lower()

    if not aggregator.has_platform(exchange):
        raise HTTPException(status_code=404, detail=f"Exchange '{exchange}' is not supported")

    try:
        async with aggregator.create_connector(exchange, None) as connector:
            return await connector.get_market_summary()
    except VolumeError as e:
        logger.error(f"{exchange} market summary failed: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch {exchange} market summary: {e}")
