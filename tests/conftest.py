import pytest

from klinechart.visualization.components.chart import ChartDimensions, Margin, PriceChart

DAY_MS = 24 * 60 * 60 * 1000
START_MS = 1_700_006_400_000  # 2023-11-15 00:00 UTC

# Plot area 400x200 inside a 480x250 container. Prices span 100..200 on the
# `chart` fixture, so price_to_y(p) == (200 - p) * 2 and a price sits at
# container Y 20 + (200 - p) * 2.
MARGIN = dict(top=20, right=70, bottom=30, left=10)


@pytest.fixture
def make_points():
    """Factory building chronological price points from a list of prices."""
    def _make(prices, start=START_MS, step=DAY_MS):
        return [{'timestamp': start + i * step, 'price': p} for i, p in enumerate(prices)]
    return _make


@pytest.fixture
def container_y():
    """Container Y of a price on the `chart` fixture."""
    return lambda price: MARGIN['top'] + (200 - price) * 2


@pytest.fixture
def sample_prices(make_points):
    """Five daily closes between 100 and 200."""
    return make_points([100.0, 150.0, 200.0, 120.0, 180.0])


@pytest.fixture
def dimensions():
    """Plot-area dimensions shared by the chart fixtures."""
    return ChartDimensions(width=400, height=200, margin=Margin(**MARGIN))


@pytest.fixture
def empty_chart(dimensions):
    """Chart without data."""
    return PriceChart(dimensions)


@pytest.fixture
def chart(dimensions, sample_prices):
    """Chart holding the sample prices."""
    chart = PriceChart(dimensions)
    chart.set_data(sample_prices)
    return chart


@pytest.fixture
def surface(chart):
    return chart.surface
