"""
Base class for kline price providers.

This module defines the abstract base class that every upstream price source
implements, together with the error raised when the upstream cannot serve a
request.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Union

import pandas as pd


class UpstreamError(Exception):
    """Raised when the upstream market-data API fails."""


class KlineProvider(ABC):
    """Abstract base class for kline price providers."""

    @property
    @abstractmethod
    def supported_intervals(self) -> List[str]:
        """List of intervals supported by this provider.

        Returns:
            List[str]: Interval strings (e.g., ['1m', '1h', '1d'])
        """
        pass

    @abstractmethod
    def fetch_prices(
        self,
        symbol: str,
        interval: str = '1d',
        limit: int = 168
    ) -> List[Dict[str, Union[int, str, float]]]:
        """Fetch the most recent closing prices for a symbol.

        Args:
            symbol: Trading pair symbol (e.g., 'BTCUSDT')
            interval: Kline interval (e.g., '1h', '1d')
            limit: Number of klines to fetch

        Returns:
            List[Dict]: Points ``{timestamp, date, price}`` in ascending
            timestamp order

        Raises:
            ValueError: If the interval is not supported
            UpstreamError: If data cannot be fetched
        """
        pass

    def validate_interval(self, interval: str) -> None:
        """Validate that an interval is supported by this provider.

        Args:
            interval: The interval to validate

        Raises:
            ValueError: If the interval is not supported
        """
        if interval not in self.supported_intervals:
            raise ValueError(
                f"Interval '{interval}' not supported. "
                f"Supported intervals: {self.supported_intervals}"
            )


def iso_date(timestamp_ms: int) -> str:
    """ISO-8601 UTC date with millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(timestamp_ms) % 1000:03d}Z"


def to_price_points(frame: pd.DataFrame) -> List[Dict[str, Union[int, str, float]]]:
    """Convert a frame with ``timestamp`` (ms) and ``price`` columns to API points.

    Args:
        frame: DataFrame with integer millisecond timestamps and prices

    Returns:
        List[Dict]: Points sorted by timestamp
    """
    frame = frame.sort_values('timestamp')
    return [
        {
            'timestamp': int(ts),
            'date': iso_date(int(ts)),
            'price': float(price),
        }
        for ts, price in zip(frame['timestamp'], frame['price'])
    ]
