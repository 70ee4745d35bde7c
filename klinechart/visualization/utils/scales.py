"""Scale utilities for chart visualization."""

from dataclasses import dataclass
from typing import Sequence, Tuple


class LinearScale:
    """Linear scale for numeric values."""

    def __init__(self, domain: Tuple[float, float], range: Tuple[float, float]):
        """Initialize the scale.

        A degenerate domain (both ends equal) is widened by one unit on each
        side so the scale stays invertible.

        Args:
            domain: Input domain (min, max)
            range: Output range (min, max)
        """
        lo, hi = float(domain[0]), float(domain[1])
        if lo == hi:
            lo, hi = lo - 1.0, hi + 1.0
        self.domain = (lo, hi)
        self.range = (float(range[0]), float(range[1]))
        self.step = (self.range[1] - self.range[0]) / (hi - lo)

    def transform(self, value: float) -> float:
        """Transform a value from domain to range.

        Args:
            value: Input value

        Returns:
            Transformed value
        """
        domain_ratio = (value - self.domain[0]) / (self.domain[1] - self.domain[0])
        return self.range[0] + domain_ratio * (self.range[1] - self.range[0])

    def invert(self, value: float) -> float:
        """Transform a value from range back to domain.

        Args:
            value: Input value

        Returns:
            Original value
        """
        range_ratio = (value - self.range[0]) / (self.range[1] - self.range[0])
        return self.domain[0] + range_ratio * (self.domain[1] - self.domain[0])

    def ticks(self, count: int = 5) -> Sequence[float]:
        """Evenly spaced domain values, both ends included."""
        if count < 2:
            return [self.domain[0]]
        span = self.domain[1] - self.domain[0]
        return [self.domain[0] + span * i / (count - 1) for i in range(count)]


class TimeScale(LinearScale):
    """Time scale for millisecond timestamps."""

    def transform(self, value: float) -> float:
        """Transform a timestamp in milliseconds to a pixel coordinate."""
        return super().transform(float(value))

    def invert(self, value: float) -> float:
        """Transform a pixel coordinate back to a timestamp in milliseconds."""
        return super().invert(value)


@dataclass(frozen=True)
class CoordinateMapper:
    """Maps between price/time space and plot-area pixels.

    Pixel coordinates are relative to the plot area, i.e. without margins.
    A mapper belongs to one set of dimensions and one series domain; the chart
    builds a new one whenever either changes.
    """
    x: TimeScale
    y: LinearScale

    @classmethod
    def build(
        cls,
        time_domain: Tuple[float, float],
        price_domain: Tuple[float, float],
        width: float,
        height: float
    ) -> 'CoordinateMapper':
        """Create the mapper for a plot area of `width` x `height` pixels.

        Args:
            time_domain: First and last timestamp (ms)
            price_domain: Lowest and highest price
            width: Plot-area width in pixels
            height: Plot-area height in pixels
        """
        return cls(
            x=TimeScale(time_domain, (0.0, width)),
            y=LinearScale(price_domain, (height, 0.0)),
        )

    def price_to_y(self, price: float) -> float:
        return self.y.transform(price)

    def y_to_price(self, pixel: float) -> float:
        return self.y.invert(pixel)

    def time_to_x(self, timestamp: float) -> float:
        return self.x.transform(timestamp)

    def x_to_time(self, pixel: float) -> float:
        return self.x.invert(pixel)
