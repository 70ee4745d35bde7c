from .formatting import (
    ThresholdRange,
    format_price,
    format_percent,
    percent_difference,
    threshold_range_for,
)
from .logger import setup_logging, close_logging
from .params import ChartParams, load_from_query, build_query

__all__ = [
    'ThresholdRange',
    'format_price',
    'format_percent',
    'percent_difference',
    'threshold_range_for',
    'setup_logging',
    'close_logging',
    'ChartParams',
    'load_from_query',
    'build_query',
]
