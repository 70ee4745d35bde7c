import pytest

from klinechart.marketdata import MemoryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def tick(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCache(std_ttl=300, check_period=320, clock=clock)


def test_set_and_get(cache):
    """Test basic storage and hit/miss counting."""
    assert cache.get('missing') is None

    cache.set('key', '{"a": 1}')

    assert cache.get('key') == '{"a": 1}'
    stats = cache.stats()
    assert stats['hits'] == 1
    assert stats['misses'] == 1
    assert stats['keys'] == 1
    assert stats['ksize'] == 3
    assert stats['vsize'] == 8


def test_entries_expire_after_std_ttl(cache, clock):
    """Test entries are not served once their TTL has passed."""
    cache.set('key', 'value')

    clock.tick(299)
    assert cache.get('key') == 'value'

    clock.tick(1)
    assert cache.get('key') is None
    assert cache.keys() == []


def test_custom_and_zero_ttl(cache, clock):
    """Test per-entry TTLs, zero meaning no expiry."""
    cache.set('short', 1, ttl=10)
    cache.set('forever', 2, ttl=0)

    clock.tick(10_000)

    assert cache.get('short') is None
    assert cache.get('forever') == 2


def test_sweep_removes_expired_entries(cache, clock):
    """Test the periodic sweep drops entries nobody reads."""
    cache.set('a', 1, ttl=5)
    cache.set('b', 2)

    clock.tick(320)
    cache.set('c', 3)

    assert sorted(cache.keys()) == ['c']
    assert cache.stats()['keys'] == 1


def test_delete(cache):
    """Test explicit deletion, including unknown keys."""
    cache.set('key', 'value')

    cache.delete('key')
    cache.delete('unknown')

    assert cache.get('key') is None


def test_clear_resets_entries_and_stats(cache):
    """Test clearing empties the cache and zeroes the counters."""
    cache.set('key', 'value')
    cache.get('key')
    cache.get('other')

    cache.flush_all()

    assert cache.stats() == {'hits': 0, 'misses': 0, 'keys': 0, 'ksize': 0, 'vsize': 0}


def test_vsize_of_structured_values(cache):
    """Test values other than strings are sized by their JSON form."""
    cache.set('key', [1, 2])

    assert cache.stats()['vsize'] == len('[1, 2]')
