"""LRU cache with optional per-entry expiry."""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class _Entry(Generic[T]):
    value: T
    expires_at: float | None


class ExpiringCache(Generic[T]):
    """
    Bounded mapping from string keys to values with optional expiry.

    Expiry is checked lazily on read; expired entries are dropped when touched.
    Not thread-safe: use from a single event loop or under an external lock.
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            max_size: Maximum number of items to cache.
            default_ttl: Lifetime in seconds for entries stored without an explicit ttl.
                None means entries never expire.
            clock: Monotonic time source, injectable for tests.
        """
        if max_size <= 0:
            msg = "max_size must be positive"
            raise ValueError(msg)
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._clock = clock
        self._cache: OrderedDict[str, _Entry[T]] = OrderedDict()

    def get(self, key: str) -> T | None:
        """
        Get item from cache, moving it to end (most recently used).

        Args:
            key: Cache key.

        Returns:
            Cached item, or None if missing or expired.
        """
        entry = self._cache.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            del self._cache[key]
            return None

        self._cache.move_to_end(key)
        return entry.value

    def put(self, key: str, value: T, ttl: float | None = None) -> None:
        """
        Put item in cache.

        Args:
            key: Cache key.
            value: Value to cache.
            ttl: Lifetime in seconds; falls back to the cache's default ttl.
        """
        lifetime = ttl if ttl is not None else self._default_ttl
        expires_at = self._clock() + lifetime if lifetime is not None else None

        if key in self._cache:
            self._cache.move_to_end(key)
        elif len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)

        self._cache[key] = _Entry(value=value, expires_at=expires_at)

    def update(self, key: str, value: T, ttl: float | None = None) -> bool:
        """
        Replace an existing, unexpired entry.

        The entry gets a fresh lifetime from ``ttl``, or from the default ttl
        when omitted. With neither set, the replaced entry no longer expires.

        Returns:
            True if the entry existed and was replaced, False otherwise.
        """
        if self.get(key) is None:
            return False
        self.put(key, value, ttl)
        return True

    def clear(self) -> None:
        """Clear all items from cache."""
        self._cache.clear()

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._cache)

    def _is_expired(self, entry: _Entry[T]) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    def _purge_expired(self) -> None:
        expired = [key for key, entry in self._cache.items() if self._is_expired(entry)]
        for key in expired:
            del self._cache[key]
