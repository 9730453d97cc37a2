"""
Long/Short Ratio - API.

============================================================
RESPONSIBILITY
============================================================
Thin HTTP surface over the aggregator for dashboards.

- GET /api/long-short-ratio       one record per configured exchange
- GET /api/taker-volume-summary   taker volume keyed by timeframe
- GET /api/available-markets      Binance USDT perpetual base assets
- GET /health                     liveness
============================================================
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from long_short_ratio import __version__
from long_short_ratio.aggregator import (
    available_markets,
    build_taker_volume_summarizer,
    get_default_aggregator,
)
from long_short_ratio.config import get_config
from long_short_ratio.exceptions import LongShortError
from long_short_ratio.models import Timeframe, parse_symbol

logger = logging.getLogger(__name__)


# ============================================================
# Response Models
# ============================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str = __version__
    uptime_seconds: float = 0
    exchanges: List[str] = []


class RatioResponse(BaseModel):
    exchange: str
    status: str
    longShortRatio: Optional[float] = None
    longPercent: Optional[float] = None
    shortPercent: Optional[float] = None
    message: Optional[str] = None
    rawInfo: Optional[Any] = None


class TakerVolumeResponse(BaseModel):
    source: str
    timeframe: str
    status: str
    totalVolume: Optional[float] = None
    longs: Optional[float] = None
    shorts: Optional[float] = None
    buySellRatio: Optional[float] = None
    longPercent: Optional[float] = None
    shortPercent: Optional[float] = None
    message: Optional[str] = None


# ============================================================
# FastAPI Application
# ============================================================

app = FastAPI(
    title="Long/Short Ratio API",
    description="Cross-exchange long/short account ratio snapshot",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Startup time for uptime calculation
_startup_time = datetime.utcnow()


def _parse_timeframe(value: str) -> Timeframe:
    try:
        return Timeframe.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _parse_symbol(value: Optional[str]) -> str:
    try:
        return parse_symbol(value or get_config().default_symbol)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================
# API Endpoints
# ============================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    uptime = (datetime.utcnow() - _startup_time).total_seconds()
    return HealthResponse(
        status="ok",
        timestamp=datetime.utcnow().isoformat(),
        uptime_seconds=uptime,
        exchanges=list(get_config().exchanges),
    )


@app.get(
    "/api/long-short-ratio",
    response_model=List[RatioResponse],
    response_model_exclude_none=True,
    tags=["Ratio"],
)
async def get_long_short_ratio(
    symbol: Optional[str] = Query(None, description="Base asset, e.g. BTC"),
    timeframe: Optional[str] = Query(None, description="5m, 15m, 30m, 1h, 4h or 1d"),
):
    """Long/short account ratio from every configured exchange."""
    config = get_config()
    tf = _parse_timeframe(timeframe) if timeframe else config.default_timeframe
    symbol = _parse_symbol(symbol)

    records = await get_default_aggregator().aggregate(symbol, tf)
    return [record.to_dict() for record in records]


@app.get(
    "/api/taker-volume-summary",
    response_model=Dict[str, TakerVolumeResponse],
    response_model_exclude_none=True,
    tags=["Taker Volume"],
)
async def get_taker_volume_summary(
    symbol: Optional[str] = Query(None, description="Base asset, e.g. BTC"),
    source: Optional[str] = Query(None, description="Taker volume source id"),
):
    """Taker buy/sell volume for every timeframe, keyed by timeframe."""
    config = get_config()
    symbol = _parse_symbol(symbol)

    try:
        summarizer = build_taker_volume_summarizer(config, source_id=source)
    except LongShortError as e:
        raise HTTPException(status_code=400, detail=e.message)

    records = await summarizer.summarize(symbol)
    return {record.timeframe.value: record.to_dict(include_raw=False) for record in records}


@app.get("/api/available-markets", response_model=List[str], tags=["Markets"])
async def get_available_markets():
    """Base assets of Binance USDT perpetual contracts."""
    try:
        return await available_markets()
    except LongShortError as e:
        logger.error(f"Failed to load available markets: {e}")
        raise HTTPException(status_code=502, detail=e.message)
