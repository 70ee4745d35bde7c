"""Visualization utilities."""

from .scales import CoordinateMapper, LinearScale, TimeScale
from .axis import XAxisController
from .renderer import MatplotlibRenderer, Renderer, SceneRenderer, parse_color, save_snapshot

__all__ = [
    'CoordinateMapper',
    'LinearScale',
    'TimeScale',
    'XAxisController',
    'Renderer',
    'MatplotlibRenderer',
    'SceneRenderer',
    'parse_color',
    'save_snapshot',
]
