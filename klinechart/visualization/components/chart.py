"""Price chart component owning the chart state read by the overlays."""

import logging
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from ..utils.scales import CoordinateMapper
from ..overlays.base import OverlayRegistry
from .surface import Surface

logger = logging.getLogger(__name__)


@dataclass
class Margin:
    """Space around the plot area, in pixels."""
    top: float = 20.0
    right: float = 70.0
    bottom: float = 30.0
    left: float = 10.0


@dataclass
class ChartDimensions:
    """Chart dimensions configuration.

    `width` and `height` are the plot area; the container adds the margins.
    """
    width: float = 720.0
    height: float = 400.0
    margin: Margin = field(default_factory=Margin)

    @property
    def outer_width(self) -> float:
        """Get container width (including margins)."""
        return self.width + self.margin.left + self.margin.right

    @property
    def outer_height(self) -> float:
        """Get container height (including margins)."""
        return self.height + self.margin.top + self.margin.bottom

    @property
    def plot_bottom(self) -> float:
        """Container Y of the bottom edge of the plot area."""
        return self.margin.top + self.height

    @classmethod
    def for_container(cls, width: float, height: float, margin: Optional[Margin] = None) -> 'ChartDimensions':
        """Dimensions of the plot area inside a container of the given size."""
        margin = margin or Margin()
        return cls(
            width=max(0.0, width - margin.left - margin.right),
            height=max(0.0, height - margin.top - margin.bottom),
            margin=margin,
        )


@dataclass(frozen=True)
class PricePoint:
    """One point of the price series."""
    timestamp: int  # milliseconds since epoch
    price: float


SeriesInput = Union[pd.DataFrame, Iterable[Union[PricePoint, dict]], None]


def to_series(data: SeriesInput) -> List[PricePoint]:
    """Normalise price data into a chronological list of points.

    Args:
        data: DataFrame or iterable of PricePoint/dicts with ``timestamp``
            (milliseconds or datetimes) and ``price`` fields

    Returns:
        List[PricePoint]: Points sorted by timestamp, rows without a price dropped
    """
    if data is None:
        return []

    if isinstance(data, pd.DataFrame):
        frame = data
    else:
        rows = [asdict(p) if is_dataclass(p) else dict(p) for p in data]
        if not rows:
            return []
        frame = pd.DataFrame(rows)

    if frame.empty:
        return []

    missing = [col for col in ('timestamp', 'price') if col not in frame.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    frame = frame[['timestamp', 'price']].copy()
    if not pd.api.types.is_numeric_dtype(frame['timestamp']):
        stamps = pd.to_datetime(frame['timestamp'], utc=True)
        frame['timestamp'] = (stamps - pd.Timestamp(0, tz='UTC')) // pd.Timedelta(milliseconds=1)

    frame['price'] = pd.to_numeric(frame['price'], errors='coerce')
    frame = frame.dropna().sort_values('timestamp', kind='stable')

    return [
        PricePoint(timestamp=int(ts), price=float(price))
        for ts, price in zip(frame['timestamp'], frame['price'])
    ]


class PriceChart:
    """Price line chart: owns the series, the dimensions and the overlays.

    The chart is the only writer of its state. Overlays read `series`,
    `dimensions` and `mapper` and are notified through the registry when the
    data or the size changes.
    """

    def __init__(
        self,
        dimensions: Optional[ChartDimensions] = None,
        surface: Optional[Surface] = None
    ):
        """Initialize the chart.

        Args:
            dimensions: Plot-area dimensions and margins
            surface: Container surface, created to fit the dimensions when omitted
        """
        self.dimensions = dimensions or ChartDimensions()
        self.surface = surface or Surface(
            width=self.dimensions.outer_width,
            height=self.dimensions.outer_height,
        )

        # Data state
        self.series: List[PricePoint] = []
        self.mapper: Optional[CoordinateMapper] = None

        self.overlays = OverlayRegistry(self, self.surface)

    @property
    def last_point(self) -> Optional[PricePoint]:
        return self.series[-1] if self.series else None

    @property
    def price_domain(self) -> Optional[tuple]:
        if not self.series:
            return None
        prices = np.fromiter((p.price for p in self.series), dtype=np.float64)
        return float(prices.min()), float(prices.max())

    def set_data(self, data: SeriesInput) -> None:
        """Replace the series and notify the overlays.

        Args:
            data: Price points, see `to_series`
        """
        self.series = to_series(data)
        self._update_scales()
        logger.debug(f"Chart data set: {len(self.series)} points")
        self.overlays.on_update()

    def resize(self, width: float, height: float, viewport_width: Optional[float] = None) -> None:
        """Fit the chart to a container of `width` x `height` pixels.

        Args:
            width: Container width
            height: Container height
            viewport_width: Page viewport width, used for narrow layouts
        """
        self.dimensions = ChartDimensions.for_container(width, height, self.dimensions.margin)
        self.surface.width = width
        self.surface.height = height
        if viewport_width is not None:
            self.surface.viewport_width = viewport_width
        self._update_scales()
        logger.debug(f"Chart resized to {width}x{height}")
        self.overlays.on_resize()

    def _update_scales(self) -> None:
        """Rebuild the coordinate mapper from the series and dimensions."""
        if not self.series:
            self.mapper = None
            return

        self.mapper = CoordinateMapper.build(
            time_domain=(self.series[0].timestamp, self.series[-1].timestamp),
            price_domain=self.price_domain,
            width=self.dimensions.width,
            height=self.dimensions.height,
        )

    def to_pixel_coords(self, timestamp: float, price: float) -> Optional[tuple]:
        """Convert data coordinates to container pixel coordinates.

        Returns:
            tuple: (x, y), or None when there is no data
        """
        if self.mapper is None:
            return None
        margin = self.dimensions.margin
        return (
            margin.left + self.mapper.time_to_x(timestamp),
            margin.top + self.mapper.price_to_y(price),
        )
