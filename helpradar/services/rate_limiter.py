"""
In-process fixed-window rate limiter keyed by caller address.
Single node only: every server process keeps its own counters.
"""
import time
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)

@dataclass
class RateWindow:
    count: int
    reset_at_ms: float

class InMemoryRateLimiter:
    def __init__(self, clock: Callable[[], float] = None):
        # {key: RateWindow}
        self.windows: Dict[str, RateWindow] = {}
        self._clock = clock or (lambda: time.time() * 1000)
        self._lock = threading.Lock()

    def check_rate_limit(self, key: str, max_requests: int = 10, window_ms: int = 60000) -> bool:
        """Count a request for key, False once the window's budget is spent"""
        now = self._clock()
        with self._lock:
            window = self.windows.get(key)

            if window is None or now > window.reset_at_ms:
                self.windows[key] = RateWindow(count=1, reset_at_ms=now + window_ms)
                return True

            if window.count >= max_requests:
                logger.warning(f"Rate limit exceeded for {key}: {window.count}/{max_requests}")
                return False

            window.count += 1
            return True

    def sweep_expired(self) -> int:
        """Drop keys whose window already reset, returns how many were removed"""
        now = self._clock()
        with self._lock:
            expired = [key for key, window in self.windows.items() if now > window.reset_at_ms]
            for key in expired:
                del self.windows[key]
        if expired:
            logger.info(f"Swept {len(expired)} expired rate limit windows")
        return len(expired)

    def reset(self):
        with self._lock:
            self.windows.clear()

# Global limiter instance
rate_limiter = InMemoryRateLimiter()
