"""Chart parameters persisted in the page URL query string."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qs, urlencode

from .formatting import ThresholdRange

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_RANGE = ThresholdRange()


@dataclass
class ChartParams:
    """Parameters selecting the price series shown on the chart."""
    symbol: str = 'BTCUSDT'
    interval: str = '1d'
    limit: int = 168
    threshold: float = 0.0


def _first(query: Mapping, key: str) -> Optional[str]:
    value = query.get(key)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _parse_float(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    # NaN never compares, reject it like an unparsable value
    if value != value:
        return None
    return value


def load_from_query(
    query: Union[str, Mapping],
    defaults: Optional[ChartParams] = None
) -> Tuple[ChartParams, Dict[str, float]]:
    """Load chart parameters from a URL query.

    Every parameter is optional; absent or unparsable values keep the
    default.

    Args:
        query: Raw query string (``symbol=ETHUSDT&limit=50``) or a mapping
        defaults: Parameters used when a value is missing

    Returns:
        Tuple[ChartParams, Dict[str, float]]: Parsed parameters and the
        threshold slider settings present in the query (``min``, ``max``,
        ``step``)
    """
    if isinstance(query, str):
        query = parse_qs(query.lstrip('?'), keep_blank_values=True)
    params = replace(defaults) if defaults is not None else ChartParams()

    symbol = _first(query, 'symbol')
    if symbol:
        params.symbol = symbol

    interval = _first(query, 'interval')
    if interval:
        params.interval = interval

    limit = _parse_int(_first(query, 'limit'))
    if limit is not None and limit > 0:
        params.limit = limit

    threshold = _parse_float(_first(query, 'threshold'))
    if threshold is not None and threshold >= 0:
        params.threshold = threshold

    threshold_range: Dict[str, float] = {}
    for key, name in (('thresholdMin', 'min'), ('thresholdMax', 'max'), ('thresholdStep', 'step')):
        value = _parse_float(_first(query, key))
        if value is not None:
            threshold_range[name] = value

    logger.debug(f"Loaded chart params {params}, threshold range {threshold_range}")
    return params, threshold_range


def build_query(params: ChartParams, threshold_range: Optional[ThresholdRange] = None) -> str:
    """Serialise chart parameters back into a query string.

    Threshold slider settings are only written when they differ from the
    defaults.
    """
    items = [
        ('symbol', params.symbol),
        ('interval', params.interval),
        ('limit', str(params.limit)),
        ('threshold', _format_number(params.threshold)),
    ]

    threshold_range = threshold_range or DEFAULT_THRESHOLD_RANGE
    if threshold_range.min != DEFAULT_THRESHOLD_RANGE.min:
        items.append(('thresholdMin', _format_number(threshold_range.min)))
    if threshold_range.max != DEFAULT_THRESHOLD_RANGE.max:
        items.append(('thresholdMax', _format_number(threshold_range.max)))
    if threshold_range.step != DEFAULT_THRESHOLD_RANGE.step:
        items.append(('thresholdStep', _format_number(threshold_range.step)))

    return urlencode(items)


def _format_number(value: float) -> str:
    # 5.0 -> "5", 0.25 -> "0.25"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
