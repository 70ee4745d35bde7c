"""Line tracking the latest price, with the percent change since the previous one."""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ...utils.formatting import format_percent, percent_difference
from ..utils.scales import CoordinateMapper
from .base import Overlay
from .price_line import LABEL_OFFSET, NARROW_LABEL_OFFSET, PriceLine, PriceLineOptions, label_style

logger = logging.getLogger(__name__)

UP_COLOR = '#4caf50'
DOWN_COLOR = '#ff5252'
BADGE_OFFSET = 20
NARROW_BADGE_OFFSET = 16


@dataclass
class CurrentPriceOptions:
    line_color: str = '#3498db'
    line_width: float = 1.0
    style: str = 'dashed'
    bullet_radius: float = 6.0
    label_bg_color: str = '#3498db'
    label_text_color: str = 'white'
    show_percent: bool = True


class CurrentPriceLine(Overlay):
    """Dashed line and bullet at the last point of the series.

    Whenever the last price changes, the change relative to the price shown
    before it is displayed in a badge above the line.
    """

    def __init__(self, options: Optional[CurrentPriceOptions] = None, overlay_id: Optional[str] = None, **kwargs):
        super().__init__(overlay_id)
        if options is None:
            self.options = CurrentPriceOptions(**kwargs)
        else:
            self.options = replace(options, **kwargs) if kwargs else options

        self.line = PriceLine(
            PriceLineOptions(
                price=0.0,
                style=self.options.style,
                color=self.options.line_color,
                line_width=self.options.line_width,
                label_bg_color=self.options.label_bg_color,
                label_text_color=self.options.label_text_color,
                show_bullet=True,
                bullet_radius=self.options.bullet_radius,
            ),
            overlay_id=f"{self.overlay_id}.line",
        )
        self.previous_price: Optional[float] = None
        self.current_price: Optional[float] = None
        self.percent_change: Optional[float] = None

    @property
    def percent_text(self) -> Optional[str]:
        if self.percent_change is None:
            return None
        return format_percent(self.percent_change)

    def _create_elements(self) -> None:
        self.line.initialize(self.chart, self.surface)
        self._element('badge', 'label', color='white')

    def _update_geometry(self, mapper: CoordinateMapper) -> None:
        last = self.chart.last_point
        if self.current_price is not None and last.price != self.current_price:
            self.previous_price = self.current_price
            self.percent_change = percent_difference(last.price, self.previous_price)
            logger.debug(f"{self.overlay_id}: {self.previous_price} -> {last.price} ({self.percent_text})")
        self.current_price = last.price

        self.line.options.price = last.price
        self.line.anchor_x = mapper.time_to_x(last.timestamp)

    def _paint(self) -> None:
        self.line.render()

        badge = self.elements['badge']
        if not self.options.show_percent or self.percent_change is None:
            badge.hide()
            return

        offset = NARROW_BADGE_OFFSET if self.is_narrow else BADGE_OFFSET
        margin = self.chart.dimensions.margin
        badge.set(
            top=self.line.elements['label'].get('top') - offset,
            right=margin.right + (NARROW_LABEL_OFFSET if self.is_narrow else LABEL_OFFSET),
            left=None,
            anchor='start',
            text=self.percent_text,
            background=UP_COLOR if self.percent_change >= 0 else DOWN_COLOR,
            **label_style(self.is_narrow),
        ).show()

    def _hide_elements(self) -> None:
        super()._hide_elements()
        self.line.clear()

    def dispose(self) -> None:
        self.line.dispose()
        super().dispose()
