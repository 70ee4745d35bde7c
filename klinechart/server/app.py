import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config import ServerConfig
from ..marketdata.cache import Cache, MemoryCache
from ..marketdata.providers.base import KlineProvider
from ..marketdata.providers.binance import BinanceProvider
from . import routes

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[ServerConfig] = None,
    provider: Optional[KlineProvider] = None,
    cache: Optional[Cache] = None,
) -> FastAPI:
    """Build the price proxy application.

    Args:
        config: Server configuration, defaults when omitted
        provider: Upstream price provider, Binance by default
        cache: Response cache, an in-memory TTL cache by default

    Returns:
        FastAPI: Configured application
    """
    config = config or ServerConfig()

    app = FastAPI(
        title="klinechart API",
        description="Cached kline price proxy",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Cache"],
    )

    app.state.config = config
    app.state.provider = provider or BinanceProvider(
        base_url=config.upstream_url,
        timeout=config.request_timeout,
    )
    app.state.cache = cache or MemoryCache(
        std_ttl=config.cache_ttl,
        check_period=config.cache_check_period,
    )

    app.include_router(routes.router, prefix="/api")

    # Mounted last so the API routes take precedence
    if config.static_dir and Path(config.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
        logger.info(f"Serving static files from {config.static_dir}")

    logger.info(f"Cache TTL set to {config.cache_ttl} seconds")
    return app
