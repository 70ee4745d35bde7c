"""Adaptive tick count and date formatting for the time axis."""

import math
from datetime import datetime, timezone
from typing import List, Tuple

import numpy as np

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


class XAxisController:
    """Chooses tick positions and labels for the time axis from the plot width."""

    @staticmethod
    def base_ticks(width: float) -> int:
        """Base tick count for a plot of the given width."""
        if width < 480:
            return max(5, int(width // 60))
        if width < 768:
            return max(4, int(width // 90))
        return max(4, int(width // 100))

    @staticmethod
    def tick_count(width: float) -> int:
        """Tick count, boosted on small widths so labels stay dense enough."""
        factor = 1.5 if width < 480 else (1.2 if width < 768 else 1.0)
        # Python's round is banker's rounding
        return int(math.floor(XAxisController.base_ticks(width) * factor + 0.5))

    @staticmethod
    def format_string(width: float, range_ms: float) -> str:
        """strftime pattern for tick labels.

        Args:
            width: Plot width in pixels
            range_ms: Time span of the axis in milliseconds
        """
        if range_ms > 2 * DAY_MS:
            return '%b %d'
        if range_ms > HOUR_MS:
            return '%d %b %H' if width < 768 else '%b %d %H:%M'
        return '%H:%M'

    @staticmethod
    def tick_unit(range_ms: float) -> int:
        """Time unit the ticks are aligned to, in milliseconds."""
        if range_ms > 2 * DAY_MS:
            return DAY_MS
        if range_ms > HOUR_MS:
            return HOUR_MS
        return MINUTE_MS

    @classmethod
    def tick_values(cls, domain: Tuple[float, float], width: float) -> List[int]:
        """Tick timestamps inside the domain, aligned to whole units.

        The step is a whole number of units chosen so that at most about
        `tick_count(width)` ticks fit, which avoids duplicate labels.

        Args:
            domain: First and last timestamp in milliseconds
            width: Plot width in pixels

        Returns:
            List[int]: Tick timestamps in milliseconds
        """
        start, end = float(domain[0]), float(domain[1])
        range_ms = end - start
        if range_ms <= 0:
            return [int(start)]

        unit = cls.tick_unit(range_ms)
        interval = max(1, math.ceil(range_ms / unit / cls.tick_count(width)))
        step = unit * interval
        first = math.ceil(start / step) * step
        return [int(t) for t in np.arange(first, end + 1, step)]

    @classmethod
    def format_tick(cls, timestamp_ms: float, pattern: str) -> str:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime(pattern)

    @classmethod
    def ticks(cls, domain: Tuple[float, float], width: float) -> List[Tuple[int, str]]:
        """Tick timestamps with their labels."""
        pattern = cls.format_string(width, domain[1] - domain[0])
        return [(t, cls.format_tick(t, pattern)) for t in cls.tick_values(domain, width)]
