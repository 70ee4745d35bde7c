"""Market data package for fetching and caching kline prices."""

from .cache import Cache, MemoryCache
from .providers.base import KlineProvider, UpstreamError
from .providers.binance import BinanceProvider
from .providers.mock import MockProvider

__all__ = [
    'Cache',
    'MemoryCache',
    'KlineProvider',
    'UpstreamError',
    'BinanceProvider',
    'MockProvider',
]
