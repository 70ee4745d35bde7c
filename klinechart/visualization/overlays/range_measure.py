"""Drag-to-measure tool showing the percent span of a price range."""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ...utils.formatting import format_price
from ..components.surface import ListenerScope, PointerEvent
from ..utils.scales import CoordinateMapper
from .base import Overlay, guarded
from .price_guide import PriceGuide
from .price_line import LABEL_OFFSET, NARROW_LABEL_OFFSET, label_style

logger = logging.getLogger(__name__)

MIN_SPAN = 5  # pixels; shorter drags clear the range
PERCENT_LABEL_MIN_HEIGHT = 30


class RangeState(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    HELD = 'held'


@dataclass
class RangeMeasureOptions:
    zone_color: str = 'rgba(13, 110, 253, 0.15)'
    border_color: str = '#0d6efd'
    label_bg_color: str = '#0d6efd'
    label_text_color: str = 'white'
    percent_label_bg_color: str = '#0d6efd'


class RangeMeasure(Overlay):
    """Shaded band between the press and release points of a drag.

    Dragging inside the plot draws a band with the prices at both edges and
    the span between them as a percentage of the lower price. A release
    less than 5 px from the start clears the band; otherwise the band is
    held until the next click. The price guide is suspended from the start
    of a drag until the band is cleared.
    """

    def __init__(self, options: Optional[RangeMeasureOptions] = None, overlay_id: Optional[str] = None, **kwargs):
        super().__init__(overlay_id)
        if options is None:
            self.options = RangeMeasureOptions(**kwargs)
        else:
            self.options = replace(options, **kwargs) if kwargs else options

        self.state = RangeState.IDLE
        self.start_y: Optional[float] = None  # container coordinates
        self.end_y: Optional[float] = None
        self.top_price: Optional[float] = None
        self.bottom_price: Optional[float] = None
        self._drag_listeners = ListenerScope()
        self._swallow_click = False

    @property
    def span_pixels(self) -> float:
        if self.start_y is None or self.end_y is None:
            return 0.0
        return abs(self.end_y - self.start_y)

    @property
    def percent_span(self) -> Optional[float]:
        """Span between the edge prices as a percentage of the lower one."""
        if self.top_price is None or self.bottom_price is None:
            return None
        if self.bottom_price == 0:
            return 0.0
        return abs(self.top_price - self.bottom_price) / self.bottom_price * 100

    def _create_elements(self) -> None:
        self._element(
            'zone', 'zone',
            background=self.options.zone_color,
            border_color=self.options.border_color,
        )
        for name in ('top_label', 'bottom_label'):
            self._element(
                name, 'label',
                background=self.options.label_bg_color,
                color=self.options.label_text_color,
            )
        self._element(
            'percent', 'label',
            background=self.options.percent_label_bg_color,
            color=self.options.label_text_color,
        )

    def _bind_listeners(self) -> None:
        container = self.surface.container
        self._listeners.listen(container, 'mousedown', self._on_mouse_down)
        self._listeners.listen(container, 'touchstart', self._on_touch_start)
        self._listeners.listen(container, 'click', self._on_click)

    # Guide coordination

    def _price_guide(self) -> Optional[PriceGuide]:
        if self.registry is None:
            return None
        return self.registry.get_by_type(PriceGuide)

    def _suspend_guide(self) -> None:
        guide = self._price_guide()
        if guide is not None:
            guide.suspend()

    def _resume_guide(self) -> None:
        guide = self._price_guide()
        if guide is not None:
            guide.resume()

    # Pointer input

    def _clamp(self, y: float) -> float:
        margin = self.chart.dimensions.margin
        return min(max(y, margin.top), self.surface.height - margin.bottom)

    def _in_plot(self, y: float) -> bool:
        return self._clamp(y) == y

    def _can_start(self, event: PointerEvent) -> bool:
        if not self.enabled or not self._initialized or self.state is RangeState.DRAGGING:
            return False
        if self._mapper() is None:
            return False
        return self._in_plot(event.client_y - self.surface.top)

    def _on_mouse_down(self, event: PointerEvent) -> None:
        self._swallow_click = False
        if event.button != 0 or not self._can_start(event):
            return
        event.prevent_default()
        self._begin(event)
        self._drag_listeners.listen(self.surface.document, 'mousemove', self._on_move)
        self._drag_listeners.listen(self.surface.document, 'mouseup', self._on_release)

    def _on_touch_start(self, event: PointerEvent) -> None:
        if event.touches != 1 or not self._can_start(event):
            return
        event.prevent_default()
        self._begin(event)
        self._drag_listeners.listen(self.surface.container, 'touchmove', self._on_move)
        self._drag_listeners.listen(self.surface.container, 'touchend', self._on_release)

    @guarded
    def _begin(self, event: PointerEvent) -> None:
        y = event.client_y - self.surface.top
        self.state = RangeState.DRAGGING
        self.start_y = self.end_y = y
        self._suspend_guide()
        self.render()

    @guarded
    def _on_move(self, event: PointerEvent) -> None:
        if self.state is not RangeState.DRAGGING:
            return
        event.prevent_default()
        self.end_y = self._clamp(event.client_y - self.surface.top)
        self.render()

    @guarded
    def _on_release(self, event: PointerEvent) -> None:
        if self.state is not RangeState.DRAGGING:
            return
        self._drag_listeners.release()
        if not event.is_touch:
            self.end_y = self._clamp(event.client_y - self.surface.top)

        if self.span_pixels < MIN_SPAN:
            self.clear()
            return

        self.state = RangeState.HELD
        self._swallow_click = not event.is_touch and self._inside_container(event.target)
        self.render()
        logger.debug(f"{self.overlay_id} held at {self.percent_span:.2f}%")

    def _inside_container(self, target) -> bool:
        # A click only follows a mouseup released over the container
        node = target
        while node is not None:
            if node is self.surface.container:
                return True
            node = node.parent
        return False

    def _on_click(self, event: PointerEvent) -> None:
        if self._swallow_click:
            # The click completing the mouseup that just set the range
            self._swallow_click = False
            return
        if self.state is RangeState.HELD:
            self.clear()

    # Rendering

    def _update_geometry(self, mapper: CoordinateMapper) -> None:
        top = self.chart.dimensions.margin.top
        if self.state is RangeState.DRAGGING:
            self.top_price = mapper.y_to_price(min(self.start_y, self.end_y) - top)
            self.bottom_price = mapper.y_to_price(max(self.start_y, self.end_y) - top)
        elif self.state is RangeState.HELD:
            # Keep the measured prices, move the band to where they now are
            self.start_y = top + mapper.price_to_y(self.top_price)
            self.end_y = top + mapper.price_to_y(self.bottom_price)

    def _paint(self) -> None:
        if self.state is RangeState.IDLE:
            self._hide_elements()
            return

        margin = self.chart.dimensions.margin
        top_y = min(self.start_y, self.end_y)
        bottom_y = max(self.start_y, self.end_y)
        height = bottom_y - top_y
        offset = NARROW_LABEL_OFFSET if self.is_narrow else LABEL_OFFSET
        style = label_style(self.is_narrow)

        self.elements['zone'].set(
            top=top_y, height=height, left=margin.left, right=margin.right,
        ).show()
        self.elements['top_label'].set(
            top=top_y, right=margin.right + offset, anchor='start',
            text=format_price(self.top_price), **style,
        ).show()
        self.elements['bottom_label'].set(
            top=bottom_y, right=margin.right + offset, anchor='start',
            text=format_price(self.bottom_price), **style,
        ).show()

        percent = self.elements['percent']
        if height > PERCENT_LABEL_MIN_HEIGHT:
            percent.set(
                top=top_y + height / 2, left=margin.left + offset, anchor='start',
                text=f"{self.percent_span:.2f}%", **style,
            ).show()
        else:
            percent.hide()

    @guarded
    def clear(self) -> None:
        """Drop the range, hide the band and resume the price guide."""
        self._drag_listeners.release()
        self.state = RangeState.IDLE
        self.start_y = self.end_y = None
        self.top_price = self.bottom_price = None
        self._hide_elements()
        self._resume_guide()

    def _cancel_interaction(self) -> None:
        self._drag_listeners.release()
        self._swallow_click = False

    def dispose(self) -> None:
        self._drag_listeners.release()
        super().dispose()
