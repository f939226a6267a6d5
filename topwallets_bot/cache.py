"""Short-lived in-process cache for trending token lists."""

from __future__ import annotations

import time
from typing import Any, Optional, Protocol, Tuple

from cachetools import TLRUCache

from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)


class CacheStore(Protocol):
    """Key/value store with per-entry expiry in seconds."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, expires_in: float) -> None: ...


def _time_to_use(key: str, entry: Tuple[Any, float], now: float) -> float:
    _, expires_in = entry
    return now + expires_in


class MemoryCacheStore:
    """``CacheStore`` on top of :class:`cachetools.TLRUCache`.

    Each entry carries its own lifetime; least recently used entries are
    evicted once ``maxsize`` is reached.
    """

    def __init__(self, maxsize: int = 256, timer=time.monotonic) -> None:
        self._cache: TLRUCache = TLRUCache(
            maxsize=maxsize, ttu=_time_to_use, timer=timer
        )

    def get(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        value, _ = entry
        return value

    def set(self, key: str, value: Any, expires_in: float) -> None:
        self._cache[key] = (value, expires_in)

    def expire(self) -> int:
        """Drop expired entries and return how many were removed."""
        removed = self._cache.expire()
        if removed:
            logger.debug("cache_entries_expired", count=len(removed))
        return len(removed)

    def __len__(self) -> int:
        return len(self._cache)


__all__ = ["CacheStore", "MemoryCacheStore"]
