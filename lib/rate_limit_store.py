# =============================================================================
# lib/rate_limit_store.py - Fixed Window Rate Limit Store
# =============================================================================
# Keyed request counters for the rate limiting stage.
#
# Each client identity owns a window that starts with its first request.
# Once the current time exceeds window_start + window_seconds the count
# starts over. The store is owned by one app instance and passed to the
# rate limiter at construction, so tests get isolated counters.
#
# Usage:
#   store = RateLimitStore(window_seconds=600)
#   state = store.hit("203.0.113.7")
#   if state.count > 100: ...
# =============================================================================

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from typing import Callable


@dataclass
class WindowState:
    """Request count for one client within its current window."""
    count: int
    window_start: float
    window_seconds: float

    @property
    def reset_at(self) -> float:
        """Time at which the window ends."""
        return self.window_start + self.window_seconds

    def expired(self, now: float) -> bool:
        return now > self.reset_at


class RateLimitStore:
    """
    Thread-safe keyed counter store with fixed windows.

    Attributes:
        window_seconds: Length of every window.
        _entries: Window state per client identity.
        _lock: Serializes the read-increment-write of every hit.

    Note:
        Expired entries are pruned at most once per window from inside
        hit(), so idle clients don't accumulate forever.
    """

    def __init__(
        self,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the store.

        Args:
            window_seconds: Window length in seconds. Must be greater than 0.
            clock: Source of the current time (seconds).

        Raises:
            ValueError: If window_seconds is less than or equal to 0.
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be greater than 0")
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, WindowState] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    def now(self) -> float:
        return self._clock()

    def hit(self, key: str) -> WindowState:
        """
        Count one request for key.

        Returns:
            A snapshot of the key's window after counting this request.
        """
        with self._lock:
            now = self._clock()
            state = self._entries.get(key)
            if state is None or state.expired(now):
                state = WindowState(count=0, window_start=now, window_seconds=self.window_seconds)
                self._entries[key] = state
            state.count += 1
            snapshot = replace(state)

            if now - self._last_prune >= self.window_seconds:
                self._prune_locked(now)
        return snapshot

    def get(self, key: str) -> WindowState | None:
        """Current window for key, or None when it has none or it expired."""
        with self._lock:
            state = self._entries.get(key)
            if state is None or state.expired(self._clock()):
                return None
            return replace(state)

    def reset(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def prune(self) -> int:
        """Drop expired windows and return how many were removed."""
        with self._lock:
            return self._prune_locked(self._clock())

    def _prune_locked(self, now: float) -> int:
        expired = [key for key, state in self._entries.items() if state.expired(now)]
        for key in expired:
            del self._entries[key]
        self._last_prune = now
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
