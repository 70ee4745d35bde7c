"""
klinechart - A cached kline price proxy and an interactive chart overlay system.
"""

__version__ = "0.1.0"

from . import utils
from . import marketdata
from . import visualization

__all__ = ["utils", "marketdata", "visualization"]
