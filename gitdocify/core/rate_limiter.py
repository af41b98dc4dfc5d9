"""Fixed-window rate limiter.

One instance is built at startup and handed to the request context
middleware; nothing reads it through module globals. State is in-memory and
per-process, so it is a soft throttle only and resets on restart.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

# Sweep expired windows every N calls so rotating client keys can't grow the map forever.
_EVICT_EVERY = 100


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Allow at most *limit* calls per key in each *window_seconds* window.

    Args:
        limit: Calls allowed per window. ``0`` or less disables limiting.
        window_seconds: Window length.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._calls = 0

    def allow(self, key: str) -> bool:
        """Record a call for *key* and report whether it is within the limit."""
        if self.limit <= 0:
            return True

        now = self._clock()
        with self._lock:
            self._calls += 1
            if self._calls % _EVICT_EVERY == 0:
                self._evict(now)

            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return True

            if window.count >= self.limit:
                return False

            window.count += 1
            return True

    def retry_after(self, key: str) -> float:
        """Seconds until *key*'s current window resets (0.0 if not limited)."""
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return 0.0
            return max(0.0, window.reset_at - self._clock())

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one key's window, or every window."""
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

    def _evict(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now >= w.reset_at]
        for k in expired:
            del self._windows[k]
