"""Price chart model, interactive overlays and rendering."""

from .components import ChartDimensions, Margin, PriceChart, PricePoint, Surface
from .overlays import (
    CurrentPriceLine,
    MiddleLine,
    MovableLine,
    OverlayRegistry,
    PriceGuide,
    PriceLine,
    RangeMeasure,
)
from .utils import MatplotlibRenderer, SceneRenderer, save_snapshot

__all__ = [
    'ChartDimensions',
    'Margin',
    'PriceChart',
    'PricePoint',
    'Surface',
    'OverlayRegistry',
    'PriceLine',
    'MovableLine',
    'CurrentPriceLine',
    'MiddleLine',
    'PriceGuide',
    'RangeMeasure',
    'MatplotlibRenderer',
    'SceneRenderer',
    'save_snapshot',
]
