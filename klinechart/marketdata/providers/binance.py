"""
Binance kline provider.

Fetches candles from the public Binance REST API and keeps the close price of
each candle.
"""

import logging
from typing import Dict, List, Optional, Union

import pandas as pd
import requests

from .base import KlineProvider, UpstreamError, to_price_points

logger = logging.getLogger(__name__)

KLINE_COLUMNS = [
    'open_time', 'open', 'high', 'low', 'close', 'volume',
    'close_time', 'quote_volume', 'trades', 'taker_base', 'taker_quote', 'ignore'
]


class BinanceProvider(KlineProvider):
    """Kline provider backed by ``GET /api/v3/klines``."""

    KLINES_PATH = '/api/v3/klines'

    def __init__(
        self,
        base_url: str = 'https://api.binance.com',
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        """Initialize the provider.

        Args:
            base_url: Root URL of the Binance API
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self._supported_intervals = [
            '1s', '1m', '3m', '5m', '15m', '30m', '1h', '2h', '4h',
            '6h', '8h', '12h', '1d', '3d', '1w', '1M'
        ]

    @property
    def supported_intervals(self) -> List[str]:
        return self._supported_intervals

    def fetch_prices(
        self,
        symbol: str,
        interval: str = '1d',
        limit: int = 168
    ) -> List[Dict[str, Union[int, str, float]]]:
        self.validate_interval(interval)

        url = f"{self.base_url}{self.KLINES_PATH}"
        params = {'symbol': symbol, 'interval': interval, 'limit': limit}
        logger.debug(f"Requesting {url} with {params}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as e:
            raise UpstreamError(str(e)) from e
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from upstream: {e}") from e

        if not isinstance(rows, list):
            raise UpstreamError(f"Unexpected upstream payload: {rows!r}")

        return self._format_klines(rows)

    def _format_klines(self, rows: List[list]) -> List[Dict[str, Union[int, str, float]]]:
        """Turn raw kline rows into ``{timestamp, date, price}`` points.

        Args:
            rows: Kline arrays as returned by Binance

        Returns:
            List[Dict]: One point per candle, priced at the close
        """
        if not rows:
            return []

        try:
            df = pd.DataFrame([row[:len(KLINE_COLUMNS)] for row in rows])
            df.columns = KLINE_COLUMNS[:df.shape[1]]
            frame = pd.DataFrame({
                'timestamp': df['open_time'].astype('int64'),
                'price': pd.to_numeric(df['close']),
            })
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed kline data: {e}") from e

        return to_price_points(frame)
