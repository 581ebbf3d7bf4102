"""Per-client request counters for the web layer."""

import logging
import threading
import time
import zlib
from dataclasses import dataclass
from typing import Optional

from . import LOGGER_NAME
from .config import RateLimitConfig

logger = logging.getLogger(LOGGER_NAME)


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimitStore:
    """
    Fixed-window counters keyed by client, e.g. an IP address.

    Keys are spread over a set of stripes, each with its own lock and dict,
    so concurrent requests from different clients rarely contend. Expired
    windows are dropped from a stripe whenever it is touched.
    """

    def __init__(self, limit: int = 10, window_seconds: float = 60.0, stripes: int = 16):
        self.limit = limit
        self.window = window_seconds
        self._locks = [threading.Lock() for _ in range(stripes)]
        self._windows: list[dict[str, _Window]] = [{} for _ in range(stripes)]

    @classmethod
    def from_config(cls, config: RateLimitConfig) -> "RateLimitStore":
        return cls(config.requests_per_window, config.window_seconds, config.stripes)

    def _stripe(self, key: str) -> int:
        return zlib.crc32(key.encode("utf-8")) % len(self._locks)

    def _purge(self, windows: dict[str, _Window], now: float) -> None:
        expired = [k for k, w in windows.items() if now > w.reset_at]
        for k in expired:
            del windows[k]

    def hit(self, key: str, now: Optional[float] = None) -> bool:
        """Count one request for key. Returns False once key is over the limit."""
        now = time.monotonic() if now is None else now
        idx = self._stripe(key)
        with self._locks[idx]:
            windows = self._windows[idx]
            self._purge(windows, now)
            window = windows.get(key)
            if window is None:
                windows[key] = _Window(count=1, reset_at=now + self.window)
                return True
            window.count += 1
            if window.count > self.limit:
                logger.debug(f"Rate limit exceeded for {key}")
                return False
            return True

    def remaining(self, key: str, now: Optional[float] = None) -> int:
        now = time.monotonic() if now is None else now
        idx = self._stripe(key)
        with self._locks[idx]:
            window = self._windows[idx].get(key)
            if window is None or now > window.reset_at:
                return self.limit
            return max(self.limit - window.count, 0)

    def retry_after(self, key: str, now: Optional[float] = None) -> float:
        now = time.monotonic() if now is None else now
        idx = self._stripe(key)
        with self._locks[idx]:
            window = self._windows[idx].get(key)
            if window is None:
                return 0.0
            return max(window.reset_at - now, 0.0)

    def reset(self) -> None:
        for lock, windows in zip(self._locks, self._windows):
            with lock:
                windows.clear()
