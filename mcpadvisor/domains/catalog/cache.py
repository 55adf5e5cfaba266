"""
TTL Cache - Single-slot in-memory cache with lazy expiry.

Features:
- One value per cache instance
- Expiry checked on read (no background timer)
- Injectable clock for deterministic tests
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["CacheEntry", "TTLCache", "DEFAULT_TTL_SECONDS"]

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3600.0


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached value and the clock reading when it was stored."""

    data: T
    timestamp: float


class TTLCache(Generic[T]):
    """
    Holds a single value for ``ttl_seconds``.

    Example:
        >>> cache: TTLCache[list[str]] = TTLCache(ttl_seconds=60)
        >>> cache.set(["a"])
        >>> cache.get()
        ['a']
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            ttl_seconds: Seconds a value stays valid after ``set``
            clock: Monotonic time source in seconds
        """
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry[T] | None = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def set(self, data: T) -> None:
        self._entry = CacheEntry(data=data, timestamp=self._clock())
        logger.debug("Cache set (TTL: %.0fs)", self._ttl)

    def get(self) -> T | None:
        """Return the cached value, or None if empty or expired."""
        if not self.is_valid():
            if self._entry is not None:
                logger.debug("Cache entry expired")
                self._entry = None
            return None
        assert self._entry is not None
        return self._entry.data

    def is_valid(self) -> bool:
        if self._entry is None:
            return False
        return self._clock() - self._entry.timestamp <= self._ttl

    def clear(self) -> None:
        self._entry = None
