from .surface import Element, EventTarget, ListenerScope, PointerEvent, Subscription, Surface, Timer
from .chart import ChartDimensions, Margin, PriceChart, PricePoint, to_series

__all__ = [
    'Element',
    'EventTarget',
    'ListenerScope',
    'PointerEvent',
    'Subscription',
    'Surface',
    'Timer',
    'ChartDimensions',
    'Margin',
    'PriceChart',
    'PricePoint',
    'to_series',
]
