"""Horizontal guide following the pointer, with price and percent labels."""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from ...utils.formatting import format_percent, format_price, percent_difference
from ..components.surface import PointerEvent, Timer
from ..utils.scales import CoordinateMapper
from .base import Overlay, guarded
from .current_price import DOWN_COLOR, UP_COLOR
from .drag import DragController
from .price_line import LABEL_OFFSET, NARROW_LABEL_OFFSET, label_style

logger = logging.getLogger(__name__)

PERCENT_LABEL_OFFSET = 20
TOUCH_HIDE_DELAY_MS = 3000


@dataclass
class PriceGuideOptions:
    line_color: str = '#555'
    line_dash: tuple = (1, 1)
    label_bg_color: str = '#555'
    label_text_color: str = 'white'
    show_percent: bool = True
    percent_up_color: str = UP_COLOR
    percent_down_color: str = DOWN_COLOR
    movable: bool = False
    on_moved: Optional[Callable[[float], None]] = None


class PriceGuide(Overlay):
    """Guide line at the pointer's price.

    Hidden until the pointer moves inside the plot's vertical bounds; shows
    the price under the pointer and its difference from the latest price.
    While a range measurement is active the guide is suspended: it is
    disabled and ignores all input until resumed.
    """

    def __init__(self, options: Optional[PriceGuideOptions] = None, overlay_id: Optional[str] = None, **kwargs):
        super().__init__(overlay_id)
        if options is None:
            self.options = PriceGuideOptions(**kwargs)
        else:
            self.options = replace(options, **kwargs) if kwargs else options

        self.visible = False
        self.position_y: Optional[float] = None  # container coordinates
        self.price: Optional[float] = None
        self.percent: Optional[float] = None
        self.is_disabled = False
        self._resume_enabled = True
        self._hide_timer: Optional[Timer] = None
        self.drag: Optional[DragController] = None

    @property
    def dragging(self) -> bool:
        return self.drag is not None and self.drag.active

    def _create_elements(self) -> None:
        self._element(
            'line', 'line',
            color=self.options.line_color,
            width=1.0,
            dash=self.options.line_dash,
        )
        label = self._element(
            'label', 'label',
            background=self.options.label_bg_color,
            color=self.options.label_text_color,
        )
        if self.options.show_percent:
            self._element('percent', 'label', color=self.options.label_text_color)

        if self.options.movable:
            label.set(draggable=True, cursor='ns-resize')
            self.drag = DragController(
                self.surface,
                label,
                on_start=lambda: self.price,
                on_move=self._drag_to,
                on_end=self._finish_drag,
                can_start=lambda: self.enabled and not self.is_disabled and self.visible,
            )

    def _bind_listeners(self) -> None:
        container = self.surface.container
        self._listeners.listen(container, 'mousemove', self._on_mouse_move)
        self._listeners.listen(container, 'mouseleave', self._on_mouse_leave)
        self._listeners.listen(container, 'touchstart', self._on_touch_start)
        self._listeners.listen(container, 'touchmove', self._on_touch_move)
        self._listeners.listen(container, 'touchend', self._on_touch_end)

    # Suspension by the range measurement

    def suspend(self) -> None:
        """Disable the guide until `resume`, remembering whether it was enabled."""
        if self.is_disabled:
            return
        self._resume_enabled = self.enabled
        super().set_enabled(False)
        self.is_disabled = True
        logger.debug(f"{self.overlay_id} suspended")

    def resume(self) -> None:
        """Restore the enabled state the guide had when suspended."""
        if not self.is_disabled:
            return
        self.is_disabled = False
        super().set_enabled(self._resume_enabled)
        logger.debug(f"{self.overlay_id} resumed")

    def set_enabled(self, enabled: bool) -> 'PriceGuide':
        if self.is_disabled:
            # Applied when the suspension ends
            self._resume_enabled = bool(enabled)
            return self
        return super().set_enabled(enabled)

    def _accepts_input(self) -> bool:
        return self._initialized and self.enabled and not self.is_disabled

    # Pointer input

    def _in_plot(self, y: float) -> bool:
        margin = self.chart.dimensions.margin
        return margin.top <= y <= self.surface.height - margin.bottom

    @guarded
    def _track(self, event: PointerEvent) -> None:
        y = event.client_y - self.surface.top
        if self._in_plot(y):
            self._show_at(y)
        else:
            self._hide()

    def _on_mouse_move(self, event: PointerEvent) -> None:
        if not self._accepts_input() or self.dragging:
            return
        self._track(event)

    def _on_mouse_leave(self, event: PointerEvent) -> None:
        if not self._accepts_input():
            return
        self._hide()

    def _on_touch_start(self, event: PointerEvent) -> None:
        if not self._accepts_input() or event.touches != 1:
            return
        self._cancel_hide_timer()
        self._track(event)

    def _on_touch_move(self, event: PointerEvent) -> None:
        if not self._accepts_input() or event.touches != 1:
            return
        event.prevent_default()
        self._track(event)

    def _on_touch_end(self, event: PointerEvent) -> None:
        if not self._accepts_input() or self.dragging:
            return
        self._cancel_hide_timer()
        self._hide_timer = self.surface.set_timeout(TOUCH_HIDE_DELAY_MS, self._on_hide_timer)

    def _cancel_hide_timer(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None

    def _show_at(self, y: float) -> None:
        self.position_y = y
        self.visible = True
        self.render()

    def _on_hide_timer(self) -> None:
        self._hide_timer = None
        self._hide()

    def _hide(self) -> None:
        self._cancel_hide_timer()
        self.visible = False
        self._hide_elements()

    # Dragging the label

    @guarded
    def _drag_to(self, center_y: float) -> Optional[float]:
        margin = self.chart.dimensions.margin
        y = min(max(center_y, margin.top), self.surface.height - margin.bottom)
        self._show_at(y)
        return self.price

    @guarded
    def _finish_drag(self, price: Optional[float]) -> None:
        if price is None:
            return
        logger.info(f"{self.overlay_id} moved to {format_price(price)}")
        if self.options.on_moved is not None:
            self.options.on_moved(price)

    # Programmatic use

    def set_price(self, price: float) -> None:
        """Show the guide at `price`."""
        mapper = self._mapper()
        if mapper is None:
            logger.warning(f"{self.overlay_id}: cannot place guide without chart data")
            return
        self._show_at(self.chart.dimensions.margin.top + mapper.price_to_y(price))

    def get_price(self) -> Optional[float]:
        return self.price

    # Rendering

    def _update_geometry(self, mapper: CoordinateMapper) -> None:
        if self.position_y is None:
            return
        self.price = mapper.y_to_price(self.position_y - self.chart.dimensions.margin.top)
        last = self.chart.last_point
        if self.options.show_percent and last is not None:
            self.percent = percent_difference(self.price, last.price)
        else:
            self.percent = None

    def _paint(self) -> None:
        if not self.visible or self.position_y is None:
            self._hide_elements()
            return

        dims = self.chart.dimensions
        margin = dims.margin
        y = self.position_y
        offset = NARROW_LABEL_OFFSET if self.is_narrow else LABEL_OFFSET
        style = label_style(self.is_narrow)

        self.elements['line'].set(
            x1=margin.left, x2=margin.left + dims.width, y1=y, y2=y,
        ).show()
        self.elements['label'].set(
            top=y, right=margin.right + offset, anchor='start',
            text=format_price(self.price), **style,
        ).show()

        percent_label = self.elements.get('percent')
        if percent_label is None:
            return
        if self.percent is None:
            percent_label.hide()
            return
        percent_label.set(
            top=y + PERCENT_LABEL_OFFSET,
            right=margin.right + offset,
            anchor='start',
            text=format_percent(self.percent),
            background=self.options.percent_up_color if self.percent >= 0 else self.options.percent_down_color,
            **style,
        ).show()

    def _hide_elements(self) -> None:
        self.visible = False
        super()._hide_elements()

    def _cancel_interaction(self) -> None:
        self._cancel_hide_timer()
        if self.drag is not None:
            self.drag.cancel()

    def dispose(self) -> None:
        if self.drag is not None:
            self.drag.dispose()
        super().dispose()
