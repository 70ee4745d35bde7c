"""Kline price provider implementations."""

from .base import KlineProvider, UpstreamError
from .binance import BinanceProvider
from .mock import MockProvider

__all__ = [
    'KlineProvider',
    'UpstreamError',
    'BinanceProvider',
    'MockProvider'
]
