"""Price and percentage formatting helpers shared by the overlays."""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass
class ThresholdRange:
    """Bounds and step of the threshold slider."""
    min: float = 0.0
    max: float = 1000.0
    step: float = 1.0


def format_price(price: float, decimals: Optional[int] = None) -> str:
    """Format a price with a number of decimals chosen by its magnitude.

    Args:
        price: Price to format
        decimals: Optional fixed number of decimals

    Returns:
        str: Formatted price
    """
    if decimals is None:
        magnitude = 10 ** math.floor(math.log10(price)) if price > 0 else 1
        if magnitude < 1:
            decimals = 4
        elif magnitude < 10:
            decimals = 3
        elif magnitude < 100:
            decimals = 2
        else:
            decimals = 0
    return f"{price:.{decimals}f}"


def percent_difference(price: float, reference: float) -> float:
    """Percentage difference of `price` relative to `reference`."""
    if reference == 0:
        return 0.0
    return (price - reference) / reference * 100


def format_percent(percent: float, decimals: int = 2) -> str:
    """Format a percentage with an explicit sign, e.g. ``+1.25%``."""
    sign = '+' if percent >= 0 else ''
    return f"{sign}{percent:.{decimals}f}%"


def threshold_range_for(last_price: float) -> ThresholdRange:
    """Slider range scaled to the order of magnitude of the latest price."""
    magnitude = 10 ** math.ceil(math.log10(last_price)) if last_price > 0 else 10
    return ThresholdRange(min=0.0, max=magnitude * 0.10, step=magnitude * 0.0001)
