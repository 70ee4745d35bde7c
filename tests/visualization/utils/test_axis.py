"""Unit tests for the time axis controller."""

import pytest

from klinechart.visualization.utils.axis import DAY_MS, HOUR_MS, MINUTE_MS, XAxisController


@pytest.mark.parametrize('width,expected', [
    (300, 5),
    (479, 7),
    (600, 6),
    (767, 8),
    (800, 8),
    (1200, 12),
])
def test_base_ticks(width, expected):
    """Test base tick count per width band."""
    assert XAxisController.base_ticks(width) == expected


def test_tick_count_boost_on_small_widths():
    """Test that narrow plots get proportionally more ticks."""
    assert XAxisController.tick_count(300) == 8  # round(5 * 1.5)
    assert XAxisController.tick_count(600) == 7  # round(6 * 1.2)
    assert XAxisController.tick_count(1000) == 10


@pytest.mark.parametrize('width,range_ms,expected', [
    (800, 7 * DAY_MS, '%b %d'),
    (400, 3 * DAY_MS, '%b %d'),
    (400, DAY_MS, '%d %b %H'),
    (800, DAY_MS, '%b %d %H:%M'),
    (800, 30 * MINUTE_MS, '%H:%M'),
])
def test_format_string(width, range_ms, expected):
    """Test label pattern selection by range and width."""
    assert XAxisController.format_string(width, range_ms) == expected


def test_tick_values_aligned_and_within_domain():
    """Test that ticks are whole days inside the domain."""
    start = 1_700_006_400_000
    end = start + 30 * DAY_MS

    ticks = XAxisController.tick_values((start, end), 800)

    assert ticks
    assert all(start <= t <= end for t in ticks)
    assert all(t % DAY_MS == 0 for t in ticks)
    assert len(ticks) <= XAxisController.tick_count(800) + 1
    steps = {b - a for a, b in zip(ticks, ticks[1:])}
    assert len(steps) == 1


def test_tick_values_intraday_uses_hours():
    """Test that ranges under two days tick on hours."""
    start = 1_700_006_400_000
    ticks = XAxisController.tick_values((start, start + 12 * HOUR_MS), 800)

    assert all(t % HOUR_MS == 0 for t in ticks)


def test_tick_values_empty_range():
    """Test a single-timestamp domain."""
    assert XAxisController.tick_values((1000, 1000), 800) == [1000]


def test_ticks_are_labelled():
    """Test labels use the chosen pattern in UTC."""
    start = 1_700_006_400_000  # 2023-11-15
    ticks = XAxisController.ticks((start, start + 7 * DAY_MS), 800)

    assert ticks[0] == (start, 'Nov 15')
