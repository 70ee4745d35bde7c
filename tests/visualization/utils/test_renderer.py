"""Unit tests for the renderers."""

import pytest

from klinechart.visualization.overlays import CurrentPriceLine, PriceGuide, RangeMeasure
from klinechart.visualization.utils.renderer import (
    MatplotlibRenderer,
    Renderer,
    SceneRenderer,
    parse_color,
    save_snapshot,
)


class MockRenderer(Renderer):
    """Mock renderer for testing."""

    def __init__(self):
        self.calls = []

    def clear(self) -> None:
        self.calls.append(('clear',))

    def draw_line(self, start, end, color, width=1.0, dash=None) -> None:
        self.calls.append(('draw_line', start, end, color, width, dash))

    def draw_polyline(self, points, color, width=1.0) -> None:
        self.calls.append(('draw_polyline', points, color, width))

    def draw_rect(self, x, y, width, height, color, fill=True, line_width=1.0) -> None:
        self.calls.append(('draw_rect', x, y, width, height, color, fill, line_width))

    def draw_text(self, text, pos, color, font_size=12.0, align='left', baseline='top', background=None) -> None:
        self.calls.append(('draw_text', text, pos, color, font_size, align, baseline, background))

    def draw_circle(self, center, radius, color, fill=True, line_width=1.0) -> None:
        self.calls.append(('draw_circle', center, radius, color, fill, line_width))

    def of(self, kind):
        return [c for c in self.calls if c[0] == kind]


@pytest.fixture
def mock_renderer():
    """Create a mock renderer."""
    return MockRenderer()


def test_parse_color():
    """Test CSS colour parsing."""
    assert parse_color('#ff0000') == (1.0, 0.0, 0.0, 1.0)
    assert parse_color('white') == (1.0, 1.0, 1.0, 1.0)
    assert parse_color('rgba(13, 110, 253, 0.15)') == pytest.approx((13 / 255, 110 / 255, 253 / 255, 0.15))
    assert parse_color('rgb(0, 0, 255)') == (0.0, 0.0, 1.0, 1.0)
    assert parse_color(None, default=(0.5, 0.5, 0.5)) == (0.5, 0.5, 0.5)


def test_scene_renders_series(chart, mock_renderer):
    """Test that the series is drawn through the chart's pixel mapping."""
    SceneRenderer(chart, mock_renderer).render()

    assert mock_renderer.calls[0] == ('clear',)
    polylines = mock_renderer.of('draw_polyline')
    assert len(polylines) == 1
    points = polylines[0][1]
    assert len(points) == len(chart.series)
    assert points[0] == pytest.approx((10, 220))  # first point, price 100
    assert points[2] == pytest.approx((210, 20))  # highest point, price 200


def test_scene_renders_visible_overlay_elements(chart, mock_renderer):
    """Test that visible overlay elements are drawn and hidden ones are not."""
    chart.overlays.add(CurrentPriceLine())
    chart.overlays.add(PriceGuide())  # hidden until the pointer moves

    SceneRenderer(chart, mock_renderer).render()

    circles = mock_renderer.of('draw_circle')
    assert len(circles) == 1
    assert circles[0][1] == pytest.approx((410, 60))  # last point, price 180

    texts = [c[1] for c in mock_renderer.of('draw_text')]
    assert '180' in texts


def test_scene_renders_range_zone(chart, surface, mock_renderer):
    """Test that a held range draws its band."""
    chart.overlays.add(RangeMeasure())
    surface.mouse_down(60)
    surface.mouse_move(140)
    surface.mouse_up(140)

    SceneRenderer(chart, mock_renderer).render()

    rects = mock_renderer.of('draw_rect')
    assert len(rects) == 1
    assert rects[0][1:5] == pytest.approx((10, 60, 400, 80))


def test_scene_without_data(empty_chart, mock_renderer):
    """Test rendering an empty chart only clears."""
    SceneRenderer(empty_chart, mock_renderer).render()

    assert mock_renderer.calls == [('clear',)]


def test_matplotlib_snapshot(chart, tmp_path):
    """Test writing a PNG snapshot."""
    chart.overlays.add(CurrentPriceLine())
    path = tmp_path / 'chart.png'

    save_snapshot(chart, str(path))

    assert path.exists()
    assert path.read_bytes()[:8] == b'\x89PNG\r\n\x1a\n'


def test_matplotlib_renderer_draws_on_axes():
    """Test that primitives become matplotlib artists."""
    renderer = MatplotlibRenderer(200, 100)
    renderer.clear()
    renderer.draw_line((0, 0), (100, 50), (0, 0, 0), dash=(5, 3))
    renderer.draw_rect(10, 10, 20, 20, (0, 0, 1, 0.2))
    renderer.draw_circle((50, 50), 4, (1, 0, 0))
    renderer.draw_text('100', (5, 5), (0, 0, 0), background=(0, 0, 1, 1))

    assert len(renderer.axes.lines) == 1
    assert len(renderer.axes.patches) == 2
    assert len(renderer.axes.texts) == 1
    assert renderer.axes.get_ylim() == (100, 0)
