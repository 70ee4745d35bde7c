"""
Mock kline provider for testing and offline use.

This module provides a mock implementation of the KlineProvider interface
that generates a synthetic closing-price series.
"""

import time
import logging
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .base import KlineProvider, to_price_points

logger = logging.getLogger(__name__)

_INTERVAL_MS = {
    '1m': 60_000,
    '5m': 5 * 60_000,
    '15m': 15 * 60_000,
    '1h': 60 * 60_000,
    '4h': 4 * 60 * 60_000,
    '1d': 24 * 60 * 60_000,
}


class MockProvider(KlineProvider):
    """Mock provider that generates a geometric random walk."""

    def __init__(
        self,
        seed: int = 42,
        base_price: float = 50000.0,
        end_time_ms: Optional[int] = None
    ):
        """Initialize the mock provider.

        Args:
            seed: Random seed for reproducible data generation
            base_price: Starting price of the walk
            end_time_ms: Timestamp of the last point, now by default
        """
        self._supported_intervals = list(_INTERVAL_MS)
        self.seed = seed
        self.base_price = base_price
        self.end_time_ms = end_time_ms
        self.calls = 0

    @property
    def supported_intervals(self) -> List[str]:
        return self._supported_intervals

    def _interval_to_ms(self, interval: str) -> int:
        """Convert interval string to milliseconds."""
        self.validate_interval(interval)
        return _INTERVAL_MS[interval]

    def fetch_prices(
        self,
        symbol: str,
        interval: str = '1d',
        limit: int = 168
    ) -> List[Dict[str, Union[int, str, float]]]:
        step = self._interval_to_ms(interval)
        self.calls += 1

        # Same symbol always yields the same walk
        rng = np.random.RandomState(self.seed + sum(symbol.encode()))
        returns = rng.normal(0.0001, 0.02, limit)
        prices = self.base_price * np.exp(np.cumsum(returns))

        end = self.end_time_ms if self.end_time_ms is not None else int(time.time() * 1000)
        end -= end % step
        timestamps = end - step * np.arange(limit - 1, -1, -1, dtype=np.int64)

        frame = pd.DataFrame({'timestamp': timestamps, 'price': np.round(prices, 2)})
        logger.debug(f"Generated {limit} mock prices for {symbol} {interval}")
        return to_price_points(frame)
