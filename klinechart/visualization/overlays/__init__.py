from .base import Overlay, OverlayRegistry, guarded
from .drag import DragController, DragState
from .price_line import PALETTE, MovableLine, MovableLineOptions, PriceLine, PriceLineOptions
from .current_price import CurrentPriceLine, CurrentPriceOptions
from .middle_line import MiddleLine, MiddleLineOptions
from .price_guide import PriceGuide, PriceGuideOptions
from .range_measure import RangeMeasure, RangeMeasureOptions, RangeState

__all__ = [
    'Overlay',
    'OverlayRegistry',
    'guarded',
    'DragController',
    'DragState',
    'PALETTE',
    'PriceLine',
    'PriceLineOptions',
    'MovableLine',
    'MovableLineOptions',
    'CurrentPriceLine',
    'CurrentPriceOptions',
    'MiddleLine',
    'MiddleLineOptions',
    'PriceGuide',
    'PriceGuideOptions',
    'RangeMeasure',
    'RangeMeasureOptions',
    'RangeState',
]
