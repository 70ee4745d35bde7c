"""Horizontal price lines, static and draggable."""

import logging
import random
from dataclasses import dataclass, replace
from typing import Callable, Optional

from ...utils.formatting import format_price
from ..utils.scales import CoordinateMapper
from .base import Overlay, guarded
from .drag import DragController

logger = logging.getLogger(__name__)

PALETTE = (
    '#3498db', '#2ecc71', '#e74c3c', '#f39c12', '#9b59b6',
    '#1abc9c', '#d35400', '#34495e', '#16a085', '#c0392b',
)

LABEL_OFFSET = 10
NARROW_LABEL_OFFSET = 5
DASH_PATTERN = (5, 3)


def label_style(narrow: bool) -> dict:
    """Font size and padding of an overlay label."""
    if narrow:
        return {'font_size': 10, 'padding': (2, 5)}
    return {'font_size': 12, 'padding': (3, 8)}


@dataclass
class PriceLineOptions:
    """Configuration of a price line.

    `color='random'` picks one of the palette colours; `label_bg_color`
    follows the line colour unless given. Without a `label` the formatted
    price is shown.
    """
    price: Optional[float] = None
    style: str = 'solid'  # 'solid' or 'dashed'
    color: str = '#3498db'
    line_width: float = 1.0
    label: Optional[str] = None
    icon: Optional[str] = None
    label_bg_color: Optional[str] = None
    label_text_color: str = 'white'
    show_bullet: bool = False
    bullet_radius: float = 4.0
    position: str = 'right'  # 'left' or 'right'
    tooltip: Optional[str] = None

    def __post_init__(self):
        if self.style not in ('solid', 'dashed'):
            logger.error(f"Invalid line style {self.style!r}, using 'solid'")
            self.style = 'solid'
        if self.position not in ('left', 'right'):
            logger.error(f"Invalid label position {self.position!r}, using 'right'")
            self.position = 'right'
        if self.color == 'random':
            self.color = random.choice(PALETTE)
        if self.label_bg_color is None:
            self.label_bg_color = self.color


class PriceLine(Overlay):
    """Horizontal line at a price with a label on the left or right edge."""

    def __init__(self, options: Optional[PriceLineOptions] = None, overlay_id: Optional[str] = None, **kwargs):
        """Initialize the price line.

        Args:
            options: Line options
            overlay_id: Registry identifier
            **kwargs: Option overrides, e.g. ``PriceLine(price=100, color='red')``
        """
        super().__init__(overlay_id)
        if options is None:
            self.options = PriceLineOptions(**kwargs)
        else:
            self.options = replace(options, **kwargs) if kwargs else options
        if self.options.price is None:
            logger.error(f"{self.overlay_id}: price option is required, using 0")

        # Pixel X of the bullet inside the plot area; the label side edge by default
        self.anchor_x: Optional[float] = None
        self.y: Optional[float] = None

    @classmethod
    def basic(cls, price: float, **kwargs) -> 'PriceLine':
        """Solid line in the default colour."""
        return cls(price=price, **kwargs)

    @classmethod
    def styled(cls, price: float, **kwargs) -> 'PriceLine':
        """Dashed red target line with a flag icon, labelled on the left."""
        options = dict(
            style='dashed',
            color='#e74c3c',
            icon='flag',
            label=f"Target: {price}",
            position='left',
        )
        options.update(kwargs)
        return cls(price=price, **options)

    @property
    def price(self) -> float:
        return self.options.price if self.options.price is not None else 0.0

    @property
    def label_text(self) -> str:
        if self.options.label is not None:
            return self.options.label
        return format_price(self.price)

    def _create_elements(self) -> None:
        self._element(
            'line', 'line',
            color=self.options.color,
            width=self.options.line_width,
            dash=DASH_PATTERN if self.options.style == 'dashed' else None,
        )
        if self.options.show_bullet:
            self._element(
                'bullet', 'circle',
                r=self.options.bullet_radius,
                color=self.options.color,
                stroke='white',
            )
        self._element(
            'label', 'label',
            icon=self.options.icon,
            background=self.options.label_bg_color,
            color=self.options.label_text_color,
        )

    def update_price(self, price: float) -> None:
        """Move the line to `price` and re-render."""
        self.options.price = price
        self.render()

    def _update_geometry(self, mapper: CoordinateMapper) -> None:
        self.y = mapper.price_to_y(self.price)

    def _paint(self) -> None:
        dims = self.chart.dimensions
        margin = dims.margin
        top = margin.top + self.y

        self.elements['line'].set(
            x1=margin.left, x2=margin.left + dims.width, y1=top, y2=top,
        ).show()

        bullet = self.elements.get('bullet')
        if bullet is not None:
            if self.anchor_x is not None:
                x = self.anchor_x
            else:
                x = 0.0 if self.options.position == 'left' else dims.width
            bullet.set(cx=margin.left + x, cy=top).show()

        text = self.label_text
        offset = NARROW_LABEL_OFFSET if self.is_narrow else LABEL_OFFSET
        label = self.elements['label']
        label.set(
            top=top,
            text=text,
            title=self.options.tooltip if self.options.tooltip is not None else text,
            **label_style(self.is_narrow),
        )
        if self.options.position == 'left':
            label.set(left=margin.left + offset, right=None, anchor='end')
        else:
            label.set(left=None, right=margin.right + offset, anchor='start')
        label.show()


@dataclass
class MovableLineOptions(PriceLineOptions):
    """Price line options plus the callback fired when a drag ends."""
    on_moved: Optional[Callable[[float], None]] = None


class MovableLine(Overlay):
    """Price line whose label can be dragged to a new price."""

    def __init__(self, options: Optional[MovableLineOptions] = None, overlay_id: Optional[str] = None, **kwargs):
        super().__init__(overlay_id)
        if options is None:
            self.options = MovableLineOptions(**kwargs)
        else:
            self.options = replace(options, **kwargs) if kwargs else options
        self.line = PriceLine(self.options, overlay_id=f"{self.overlay_id}.line")
        self.drag: Optional[DragController] = None

    @classmethod
    def price_target(cls, price: float, **kwargs) -> 'MovableLine':
        """Dashed orange target line with a crosshairs icon and a bullet."""
        options = dict(
            style='dashed',
            color='#f39c12',
            icon='crosshairs',
            label=f"Target: {price}",
            show_bullet=True,
        )
        options.update(kwargs)
        return cls(price=price, **options)

    @property
    def price(self) -> float:
        return self.line.price

    @property
    def dragging(self) -> bool:
        return self.drag is not None and self.drag.active

    def _create_elements(self) -> None:
        self.line.initialize(self.chart, self.surface)
        label = self.line.elements['label']
        label.set(draggable=True, cursor='ns-resize')
        self.drag = DragController(
            self.surface,
            label,
            on_start=lambda: self.price,
            on_move=self._drag_to,
            on_end=self._finish_drag,
            can_start=lambda: self.enabled and self.initialized,
        )

    def update_price(self, price: float) -> None:
        self.options.price = price
        self.render()

    @guarded
    def _drag_to(self, center_y: float) -> Optional[float]:
        mapper = self._mapper()
        if mapper is None:
            return None
        dims = self.chart.dimensions
        y = min(max(center_y - dims.margin.top, 0.0), dims.height)
        self.options.price = mapper.y_to_price(y)
        self.render()
        return self.options.price

    @guarded
    def _finish_drag(self, price: Optional[float]) -> None:
        if price is None:
            return
        logger.info(f"{self.overlay_id} moved to {format_price(price)}")
        if self.options.on_moved is not None:
            self.options.on_moved(price)

    def _paint(self) -> None:
        self.line.render()

    def _hide_elements(self) -> None:
        super()._hide_elements()
        self.line.clear()

    def _cancel_interaction(self) -> None:
        if self.drag is not None:
            self.drag.cancel()

    def dispose(self) -> None:
        if self.drag is not None:
            self.drag.dispose()
        self.line.dispose()
        super().dispose()
