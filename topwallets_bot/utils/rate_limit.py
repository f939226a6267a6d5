"""Simple per-user rate limiting."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Hashable

WINDOW_SECONDS = 60.0


class RateLimiter:
    """Allow at most ``limit_per_minute`` events per key in a sliding window.

    Keys are Telegram user ids for the bot and a fixed session key for the
    interactive CLI.
    """

    def __init__(
        self,
        limit_per_minute: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit_per_minute < 1:
            raise ValueError("limit_per_minute must be at least 1")
        self.limit = limit_per_minute
        self._clock = clock
        self._events: Dict[Hashable, Deque[float]] = defaultdict(deque)

    def allow(self, key: Hashable) -> bool:
        now = self._clock()
        events = self._events[key]
        while events and events[0] <= now - WINDOW_SECONDS:
            events.popleft()

        if len(events) >= self.limit:
            return False
        events.append(now)
        return True

    def retry_after(self, key: Hashable) -> float:
        """Seconds until ``key`` may send again; 0 when it already can."""
        events = self._events.get(key)
        if not events or len(events) < self.limit:
            return 0.0
        return max(0.0, events[0] + WINDOW_SECONDS - self._clock())
