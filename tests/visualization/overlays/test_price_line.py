"""Unit tests for static and movable price lines."""

import logging

import pytest

from klinechart.visualization.overlays import (
    PALETTE,
    MovableLine,
    PriceLine,
    PriceLineOptions,
    RangeMeasure,
    RangeState,
)


@pytest.fixture
def wide(surface):
    """Surface on a desktop-sized viewport."""
    surface.viewport_width = 1024
    return surface


@pytest.fixture
def target(chart):
    """Movable target line at 150 recording its callbacks."""
    moved = []
    line = chart.overlays.add(MovableLine.price_target(150, on_moved=moved.append))
    line.moved = moved
    return line


def label_of(line):
    return line.line.elements['label']


def test_line_and_label_geometry(chart, wide):
    """Test the line spans the plot at the price's Y, label on the right."""
    line = chart.overlays.add(PriceLine(price=150))

    segment = line.elements['line']
    label = line.elements['label']
    assert (segment.get('x1'), segment.get('x2')) == (10, 410)
    assert segment.get('y1') == pytest.approx(120)
    assert segment.get('dash') is None
    assert label.get('top') == pytest.approx(120)
    assert label.get('right') == 80
    assert label.get('left') is None
    assert label.get('font_size') == 12
    assert label.get('padding') == (3, 8)
    assert label.text == '150'
    assert label.get('title') == '150'
    assert segment.visible and label.visible


def test_narrow_viewport_shrinks_label(chart):
    """Test offset, font size and padding below the 600px breakpoint."""
    chart.surface.viewport_width = 400
    line = chart.overlays.add(PriceLine(price=150))

    label = line.elements['label']
    assert label.get('right') == 75
    assert label.get('font_size') == 10
    assert label.get('padding') == (2, 5)


def test_styled_line(chart, wide):
    """Test the styled factory: dashed red flag on the left."""
    line = chart.overlays.add(PriceLine.styled(150))

    label = line.elements['label']
    assert line.options.color == '#e74c3c'
    assert line.options.label_bg_color == '#e74c3c'
    assert line.elements['line'].get('dash') == (5, 3)
    assert label.get('icon') == 'flag'
    assert label.text == 'Target: 150'
    assert label.get('left') == 20
    assert label.get('anchor') == 'end'


def test_basic_line_defaults():
    """Test the basic factory keeps default styling."""
    line = PriceLine.basic(99.5)

    assert line.options.style == 'solid'
    assert line.options.color == '#3498db'
    assert line.options.position == 'right'


def test_right_bullet(chart):
    """Test the bullet sits on the right edge for right labels."""
    line = chart.overlays.add(PriceLine(price=150, show_bullet=True))

    assert line.elements['bullet'].get('cx') == 410
    assert line.elements['bullet'].get('cy') == pytest.approx(120)


def test_left_bullet(chart):
    """Test the bullet sits on the left edge for left labels."""
    line = PriceLine(price=150, show_bullet=True, position='left', overlay_id='left')
    chart.overlays.add(line)

    assert line.elements['bullet'].get('cx') == 10


def test_tooltip_overrides_title(chart):
    """Test an explicit tooltip."""
    line = chart.overlays.add(PriceLine(price=150, label='Entry', tooltip='Long entry'))

    assert line.elements['label'].text == 'Entry'
    assert line.elements['label'].get('title') == 'Long entry'


def test_update_price_rerenders(chart):
    """Test moving a line programmatically."""
    line = chart.overlays.add(PriceLine(price=150))

    line.update_price(200)

    assert line.elements['line'].get('y1') == pytest.approx(20)
    assert line.elements['label'].text == '200'


def test_line_follows_resize(chart):
    """Test the line is repositioned with the new mapper after a resize."""
    line = chart.overlays.add(PriceLine(price=150))

    chart.resize(480, 450)

    assert line.elements['line'].get('y1') == pytest.approx(20 + 200)


def test_random_color_from_palette():
    """Test random colours come from the palette."""
    options = PriceLineOptions(price=1, color='random')

    assert options.color in PALETTE
    assert options.label_bg_color == options.color


def test_invalid_options_fall_back(caplog):
    """Test unknown style and position values are logged and replaced."""
    with caplog.at_level(logging.ERROR):
        options = PriceLineOptions(price=1, style='dotted', position='top')

    assert options.style == 'solid'
    assert options.position == 'right'
    assert "Invalid line style 'dotted'" in caplog.text
    assert "Invalid label position 'top'" in caplog.text


def test_invalid_style_still_renders(chart):
    """Test a line with an unknown style is drawn solid."""
    line = chart.overlays.add(PriceLine(price=150, style='dotted'))

    assert line.elements['line'].visible
    assert line.elements['line'].get('dash') is None
    assert line.elements['line'].get('y1') == pytest.approx(120)


def test_price_target_factory():
    """Test the movable target factory."""
    line = MovableLine.price_target(150)

    assert line.options.style == 'dashed'
    assert line.options.color == '#f39c12'
    assert line.options.icon == 'crosshairs'
    assert line.options.show_bullet
    assert line.options.label == 'Target: 150'


def test_drag_moves_line_and_reports_once(chart, surface, target):
    """Test a full mouse drag: down on the label, move, up."""
    surface.mouse_down(120, target=label_of(target))
    assert target.dragging

    surface.mouse_move(60)
    assert target.price == pytest.approx(180)
    assert label_of(target).get('top') == pytest.approx(60)

    surface.mouse_up(60)

    assert not target.dragging
    assert target.moved == [pytest.approx(180)]
    assert surface.document.listener_count() == 0

    surface.mouse_move(100)
    surface.mouse_up(100)
    assert target.moved == [pytest.approx(180)]
    assert target.price == pytest.approx(180)


def test_drag_keeps_pointer_offset(chart, surface, target):
    """Test grabbing the label off-centre does not make it jump."""
    surface.mouse_down(126, target=label_of(target))
    surface.mouse_move(126)
    assert target.price == pytest.approx(150)

    surface.mouse_move(66)
    surface.mouse_up(66)
    assert target.moved == [pytest.approx(180)]


def test_drag_is_clamped_to_plot(chart, surface, target):
    """Test dragging past the plot edges stops at the price extremes."""
    surface.mouse_down(120, target=label_of(target))

    surface.mouse_move(1000)
    assert target.price == pytest.approx(100)

    surface.mouse_move(-1000)
    assert target.price == pytest.approx(200)

    surface.mouse_up(-1000)
    assert target.moved == [pytest.approx(200)]


def test_drag_callback_price_matches_inverse_scale(chart, surface, target):
    """Test the reported price is the inverse scale of the final position."""
    surface.mouse_down(120, target=label_of(target))
    surface.mouse_move(97)
    surface.mouse_up(97)

    assert target.moved == [pytest.approx(chart.mapper.y_to_price(97 - 20))]


def test_touch_drag(chart, surface, target):
    """Test a single-finger drag on the label."""
    surface.touch_start(120, target=label_of(target))
    surface.touch_move(80)
    surface.touch_end(80)

    assert target.moved == [pytest.approx(170)]
    assert label_of(target).listener_count('touchmove') == 0


def test_multi_touch_and_secondary_button_ignored(chart, surface, target):
    """Test only the primary button and single touches start a drag."""
    surface.mouse_down(120, target=label_of(target), button=2)
    assert not target.dragging

    surface.touch_start(120, target=label_of(target), touches=2)
    assert not target.dragging


def test_disable_mid_drag_releases_listeners(chart, surface, target):
    """Test disabling during a drag cancels it without a callback."""
    surface.mouse_down(120, target=label_of(target))
    surface.mouse_move(60)

    target.set_enabled(False)

    assert surface.document.listener_count() == 0
    assert not target.dragging
    surface.mouse_move(100)
    surface.mouse_up(100)
    assert target.price == pytest.approx(180)
    assert target.moved == []
    assert not label_of(target).visible


def test_dispose_mid_drag_releases_listeners(chart, surface, target):
    """Test removing the line during a drag leaves no listeners behind."""
    surface.mouse_down(120, target=label_of(target))

    chart.overlays.remove(target.overlay_id)

    assert surface.listener_count() == 0
    surface.mouse_move(60)
    surface.mouse_up(60)
    assert target.moved == []


def test_disabled_line_cannot_be_dragged(chart, surface, target):
    """Test a disabled line ignores presses."""
    target.set_enabled(False)

    surface.mouse_down(120, target=label_of(target))

    assert not target.dragging


def test_label_drag_does_not_start_range(chart, surface, target):
    """Test pressing the label is not also a range measurement."""
    measure = chart.overlays.add(RangeMeasure())

    surface.mouse_down(120, target=label_of(target))
    surface.mouse_move(60)
    surface.mouse_up(60)

    assert measure.state is RangeState.IDLE
    assert target.moved == [pytest.approx(180)]
