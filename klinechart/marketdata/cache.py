"""Caching utilities for market data responses."""

import sys
import json
import time
import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Cache(ABC):
    """Abstract base class for cache implementations."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Get a value from the cache.

        Args:
            key: Cache key

        Returns:
            Any: Cached value or None if not found
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Set a value in the cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (optional)
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a value from the cache.

        Args:
            key: Cache key
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all values from the cache."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List the keys currently held."""
        pass

    @abstractmethod
    def stats(self) -> Dict[str, int]:
        """Usage statistics of the cache."""
        pass


def _approximate_size(value: Any) -> int:
    """Rough size of a value, used for the ksize/vsize statistics."""
    if isinstance(value, str):
        return len(value)
    try:
        return len(json.dumps(value))
    except (TypeError, ValueError):
        return sys.getsizeof(value)


class MemoryCache(Cache):
    """In-process cache with a standard TTL and hit/miss statistics.

    Expired entries are dropped when they are read and by a sweep that runs
    at most once every `check_period` seconds.
    """

    def __init__(
        self,
        std_ttl: int = 300,
        check_period: int = 320,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the memory cache.

        Args:
            std_ttl: Default time to live in seconds, 0 for no expiry
            check_period: Seconds between sweeps of expired entries
            clock: Monotonic clock returning seconds
        """
        self.std_ttl = std_ttl
        self.check_period = check_period
        self._clock = clock
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._hits = 0
        self._misses = 0
        self._last_check = clock()
        self._lock = Lock()

    def _is_expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    def _check_expired(self) -> None:
        """Sweep expired entries if the check period has elapsed."""
        now = self._clock()
        if now - self._last_check < self.check_period:
            return
        self._last_check = now
        expired = [k for k, (_, exp) in self._data.items() if self._is_expired(exp)]
        for key in expired:
            del self._data[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            self._check_expired()
            entry = self._data.get(key)
            if entry is not None and self._is_expired(entry[1]):
                del self._data[key]
                entry = None

            if entry is None:
                self._misses += 1
                logger.debug(f"Cache miss for key '{key}'")
                return None

            self._hits += 1
            logger.debug(f"Cache hit for key '{key}'")
            return entry[0]

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = self.std_ttl if ttl is None else ttl
        expires_at = self._clock() + ttl if ttl > 0 else None
        with self._lock:
            self._check_expired()
            self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        """Remove every entry and reset the statistics."""
        with self._lock:
            self._data.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Cache cleared")

    flush_all = clear

    def keys(self) -> List[str]:
        with self._lock:
            return [k for k, (_, exp) in self._data.items() if not self._is_expired(exp)]

    def stats(self) -> Dict[str, int]:
        """Get cache statistics.

        Returns:
            Dict[str, int]: ``hits``, ``misses``, ``keys`` (entry count),
            ``ksize`` and ``vsize`` (approximate key and value sizes)
        """
        with self._lock:
            live = {k: v for k, (v, exp) in self._data.items() if not self._is_expired(exp)}
            return {
                'hits': self._hits,
                'misses': self._misses,
                'keys': len(live),
                'ksize': sum(len(k) for k in live),
                'vsize': sum(_approximate_size(v) for v in live.values()),
            }
