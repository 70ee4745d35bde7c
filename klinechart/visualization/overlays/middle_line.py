"""Line at the mid-price between the highest and lowest price of the series."""

from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from ...utils.formatting import format_price
from ..utils.scales import CoordinateMapper
from .base import Overlay
from .price_line import PriceLine, PriceLineOptions


@dataclass
class MiddleLineOptions:
    line_color: str = '#9b59b6'
    line_style: str = 'dashed'
    show_bullet: bool = False
    icon: Optional[str] = 'arrows-up-down'
    label_text: Optional[str] = None
    position: str = 'right'
    show_full_info: bool = False  # detail in the label instead of the tooltip


class MiddleLine(Overlay):
    """Horizontal line at ``(max + min) / 2`` of the whole series."""

    def __init__(self, options: Optional[MiddleLineOptions] = None, overlay_id: Optional[str] = None, **kwargs):
        super().__init__(overlay_id)
        if options is None:
            self.options = MiddleLineOptions(**kwargs)
        else:
            self.options = replace(options, **kwargs) if kwargs else options

        self.line = PriceLine(
            PriceLineOptions(
                price=0.0,
                style=self.options.line_style,
                color=self.options.line_color,
                show_bullet=self.options.show_bullet,
                icon=self.options.icon,
                position=self.options.position,
            ),
            overlay_id=f"{self.overlay_id}.line",
        )
        self.middle_price: Optional[float] = None
        self.high_price: Optional[float] = None
        self.low_price: Optional[float] = None

    @property
    def detail(self) -> Optional[str]:
        """Mid-price, spread and spread as a percentage of the mid-price."""
        if self.middle_price is None:
            return None
        spread = self.high_price - self.low_price
        percent = spread / self.middle_price * 100 if self.middle_price else 0.0
        return f"Middle: {format_price(self.middle_price)} (Range: {format_price(spread)}, {percent:.2f}%)"

    def _create_elements(self) -> None:
        self.line.initialize(self.chart, self.surface)

    def _update_geometry(self, mapper: CoordinateMapper) -> None:
        prices = np.fromiter((p.price for p in self.chart.series), dtype=np.float64)
        self.high_price = float(prices.max())
        self.low_price = float(prices.min())
        self.middle_price = (self.high_price + self.low_price) / 2

        if self.options.show_full_info:
            label = self.detail
        elif self.options.label_text is not None:
            label = self.options.label_text
        else:
            label = format_price(self.middle_price)

        self.line.options.price = self.middle_price
        self.line.options.label = label
        self.line.options.tooltip = self.detail

    def _paint(self) -> None:
        self.line.render()

    def _hide_elements(self) -> None:
        super()._hide_elements()
        self.line.clear()

    def dispose(self) -> None:
        self.line.dispose()
        super().dispose()
