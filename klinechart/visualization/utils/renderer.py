"""Chart rendering utilities."""

import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

from matplotlib import patches
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure

from ...utils.formatting import format_price
from .axis import XAxisController

if TYPE_CHECKING:
    from ..components.chart import PriceChart
    from ..components.surface import Element

logger = logging.getLogger(__name__)

Color = Union[Tuple[float, float, float], Tuple[float, float, float, float]]

_CSS_RGB = re.compile(r'rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)')

AXIS_COLOR = (0.2, 0.2, 0.2)
SERIES_COLOR = (0.2, 0.6, 0.86)


def parse_color(value: Optional[str], default: Color = (0.0, 0.0, 0.0)) -> Color:
    """Convert a CSS colour (name, hex or ``rgb()``/``rgba()``) to an RGBA tuple."""
    if value is None:
        return default
    match = _CSS_RGB.fullmatch(value.strip())
    if match:
        r, g, b, a = match.groups()
        return (float(r) / 255, float(g) / 255, float(b) / 255, float(a) if a is not None else 1.0)
    return to_rgba(value)


class Renderer(ABC):
    """Abstract base class for chart renderers."""

    @abstractmethod
    def clear(self) -> None:
        """Clear the rendering surface."""
        pass

    @abstractmethod
    def draw_line(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        color: Color,
        width: float = 1.0,
        dash: Optional[Sequence[float]] = None
    ) -> None:
        """Draw a line.

        Args:
            start: Start point (x, y)
            end: End point (x, y)
            color: Line color (r, g, b) or (r, g, b, a)
            width: Line width
            dash: Optional dash pattern
        """
        pass

    @abstractmethod
    def draw_polyline(
        self,
        points: List[Tuple[float, float]],
        color: Color,
        width: float = 1.0
    ) -> None:
        """Draw connected line segments through `points`."""
        pass

    @abstractmethod
    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Color,
        fill: bool = True,
        line_width: float = 1.0
    ) -> None:
        """Draw a rectangle.

        Args:
            x: Left coordinate
            y: Top coordinate
            width: Rectangle width
            height: Rectangle height
            color: Fill/stroke color (r, g, b) or (r, g, b, a)
            fill: Whether to fill the rectangle
            line_width: Stroke width if not filled
        """
        pass

    @abstractmethod
    def draw_text(
        self,
        text: str,
        pos: Tuple[float, float],
        color: Color,
        font_size: float = 12.0,
        align: str = 'left',
        baseline: str = 'top',
        background: Optional[Color] = None
    ) -> None:
        """Draw text.

        Args:
            text: Text to draw
            pos: Position (x, y)
            color: Text color
            font_size: Font size in pixels
            align: Text alignment ('left', 'center', 'right')
            baseline: Baseline alignment ('top', 'middle', 'bottom')
            background: Optional box colour behind the text
        """
        pass

    @abstractmethod
    def draw_circle(
        self,
        center: Tuple[float, float],
        radius: float,
        color: Color,
        fill: bool = True,
        line_width: float = 1.0
    ) -> None:
        """Draw a circle.

        Args:
            center: Center point (x, y)
            radius: Circle radius
            color: Fill/stroke color
            fill: Whether to fill the circle
            line_width: Stroke width if not filled
        """
        pass


class MatplotlibRenderer(Renderer):
    """Matplotlib (Agg) renderer drawing in pixel coordinates, origin top left."""

    def __init__(self, width: float, height: float, dpi: int = 100):
        """Initialize the renderer.

        Args:
            width: Canvas width in pixels
            height: Canvas height in pixels
            dpi: Resolution used to convert pixels to figure inches
        """
        self.width = width
        self.height = height
        self.dpi = dpi
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.canvas = FigureCanvasAgg(self.figure)
        self.axes = self.figure.add_axes([0, 0, 1, 1])
        self._reset_axes()

    def _reset_axes(self) -> None:
        self.axes.set_xlim(0, self.width)
        self.axes.set_ylim(self.height, 0)
        self.axes.axis('off')

    def _points(self, pixels: float) -> float:
        return pixels * 72.0 / self.dpi

    def clear(self) -> None:
        """Clear the rendering surface."""
        self.axes.clear()
        self._reset_axes()
        self.figure.set_facecolor('white')

    def draw_line(self, start, end, color, width=1.0, dash=None) -> None:
        """Draw a line."""
        line_kwargs = {}
        if dash:
            line_kwargs['dashes'] = tuple(dash)
        self.axes.plot(
            [start[0], end[0]], [start[1], end[1]],
            color=color, linewidth=self._points(width), **line_kwargs
        )

    def draw_polyline(self, points, color, width=1.0) -> None:
        """Draw connected line segments."""
        if not points:
            return
        xs, ys = zip(*points)
        self.axes.plot(xs, ys, color=color, linewidth=self._points(width))

    def draw_rect(self, x, y, width, height, color, fill=True, line_width=1.0) -> None:
        """Draw a rectangle."""
        self.axes.add_patch(patches.Rectangle(
            (x, y), width, height,
            facecolor=color if fill else 'none',
            edgecolor='none' if fill else color,
            linewidth=self._points(line_width),
        ))

    def draw_text(self, text, pos, color, font_size=12.0, align='left', baseline='top', background=None) -> None:
        """Draw text."""
        bbox = None
        if background is not None:
            bbox = dict(boxstyle='round,pad=0.3', facecolor=background, edgecolor='none')
        self.axes.text(
            pos[0], pos[1], text,
            color=color,
            fontsize=self._points(font_size),
            ha=align,
            va={'top': 'top', 'middle': 'center', 'bottom': 'bottom'}.get(baseline, 'top'),
            bbox=bbox,
        )

    def draw_circle(self, center, radius, color, fill=True, line_width=1.0) -> None:
        """Draw a circle."""
        self.axes.add_patch(patches.Circle(
            center, radius,
            facecolor=color if fill else 'none',
            edgecolor='white' if fill else color,
            linewidth=self._points(line_width),
        ))

    def save(self, path: str) -> None:
        """Write the canvas to a PNG file."""
        self.canvas.print_png(path)
        logger.info(f"Chart snapshot written to {path}")


class SceneRenderer:
    """Draws a chart, its axes and the visible overlay elements."""

    def __init__(self, chart: 'PriceChart', renderer: Renderer):
        """Initialize the scene renderer.

        Args:
            chart: The chart to render
            renderer: The renderer to use
        """
        self.chart = chart
        self.renderer = renderer

    def render(self) -> None:
        """Render the chart."""
        self.renderer.clear()
        if self.chart.mapper is None:
            logger.warning("Nothing to render: chart has no data")
            return

        self._draw_axes()
        self._draw_series()
        for element in self.chart.surface.visible_elements():
            self._draw_element(element)

    def _draw_axes(self) -> None:
        dims = self.chart.dimensions
        margin = dims.margin
        mapper = self.chart.mapper
        bottom = dims.plot_bottom
        right = margin.left + dims.width

        self.renderer.draw_line(
            start=(margin.left, bottom), end=(right, bottom), color=AXIS_COLOR,
        )
        self.renderer.draw_line(
            start=(right, margin.top), end=(right, bottom), color=AXIS_COLOR,
        )

        for timestamp, label in XAxisController.ticks(mapper.x.domain, dims.width):
            x = margin.left + mapper.time_to_x(timestamp)
            self.renderer.draw_text(
                text=label, pos=(x, bottom + 5), color=AXIS_COLOR,
                font_size=10, align='center', baseline='top',
            )

        for price in mapper.y.ticks(5):
            self.renderer.draw_text(
                text=format_price(price),
                pos=(right + 5, margin.top + mapper.price_to_y(price)),
                color=AXIS_COLOR, font_size=10, align='left', baseline='middle',
            )

    def _draw_series(self) -> None:
        points = [self.chart.to_pixel_coords(p.timestamp, p.price) for p in self.chart.series]
        self.renderer.draw_polyline(points, color=SERIES_COLOR, width=2.0)

    def _draw_element(self, element: 'Element') -> None:
        attrs = element.attrs
        if element.kind == 'line':
            self.renderer.draw_line(
                start=(attrs['x1'], attrs['y1']),
                end=(attrs['x2'], attrs['y2']),
                color=parse_color(attrs.get('color')),
                width=attrs.get('width', 1.0),
                dash=attrs.get('dash'),
            )
        elif element.kind == 'circle':
            self.renderer.draw_circle(
                center=(attrs['cx'], attrs['cy']),
                radius=attrs.get('r', 4.0),
                color=parse_color(attrs.get('color')),
            )
        elif element.kind == 'zone':
            width = self.chart.surface.width - attrs['left'] - attrs['right']
            border = parse_color(attrs.get('border_color'))
            self.renderer.draw_rect(
                attrs['left'], attrs['top'], width, attrs['height'],
                color=parse_color(attrs.get('background')),
            )
            for y in (attrs['top'], attrs['top'] + attrs['height']):
                self.renderer.draw_line(
                    start=(attrs['left'], y), end=(attrs['left'] + width, y),
                    color=border, dash=(3, 3),
                )
        elif element.kind == 'label':
            self._draw_label(element)
        else:
            logger.warning(f"Unknown element kind '{element.kind}' on {element.name}")

    def _draw_label(self, element: 'Element') -> None:
        attrs = element.attrs
        if not attrs.get('text'):
            return
        if attrs.get('left') is not None:
            x = attrs['left']
            align = 'right' if attrs.get('anchor') == 'end' else 'left'
        else:
            x = self.chart.surface.width - attrs.get('right', 0.0)
            align = 'right'
        background = attrs.get('background')
        self.renderer.draw_text(
            text=attrs['text'],
            pos=(x, attrs['top']),
            color=parse_color(attrs.get('color'), default=(1.0, 1.0, 1.0)),
            font_size=attrs.get('font_size', 12),
            align=align,
            baseline='middle',
            background=parse_color(background) if background else None,
        )


def save_snapshot(chart: 'PriceChart', path: str, dpi: int = 100) -> None:
    """Render the chart with its overlays to a PNG file."""
    renderer = MatplotlibRenderer(chart.surface.width, chart.surface.height, dpi=dpi)
    SceneRenderer(chart, renderer).render()
    renderer.save(path)
