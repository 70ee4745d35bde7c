import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..marketdata.providers.base import UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_limit(raw: Optional[str], default: int) -> int:
    """Positive integer limit, falling back to the default."""
    if raw is None:
        return default
    try:
        limit = int(raw.strip())
    except ValueError:
        return default
    return limit if limit > 0 else default


@router.get("/btc-price")
def get_prices(
    request: Request,
    symbol: Optional[str] = None,
    interval: Optional[str] = None,
    limit: Optional[str] = None,
):
    state = request.app.state
    config = state.config

    symbol = symbol or config.default_symbol
    interval = interval or config.default_interval
    limit = _parse_limit(limit, config.default_limit)

    cache_key = f"{symbol}-{interval}-{limit}"
    cached = state.cache.get(cache_key)
    if cached is not None:
        return JSONResponse(content=cached, headers={"X-Cache": "HIT"})

    try:
        prices = state.provider.fetch_prices(symbol, interval, limit)
    except (UpstreamError, ValueError) as e:
        logger.error(f"Error fetching price data: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch price data", "message": str(e)},
            headers={"X-Cache": "MISS"},
        )

    state.cache.set(cache_key, prices)
    return JSONResponse(content=prices, headers={"X-Cache": "MISS"})


@router.get("/cache/stats")
def cache_stats(request: Request):
    cache = request.app.state.cache
    return {"keys": cache.keys(), "stats": cache.stats()}


@router.post("/cache/clear")
def clear_cache(request: Request):
    request.app.state.cache.clear()
    return {"success": True, "message": "Cache cleared"}
