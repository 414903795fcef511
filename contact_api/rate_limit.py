import time
import logging
from threading import Lock
from typing import Callable, Dict, List, Optional

from contact_api.config import get_settings

LOG = logging.getLogger("contact_api.rate_limit")


def _now_ms() -> float:
    return time.time() * 1000


class SlidingWindowRateLimiter:
    """
    Per-IP sliding window held in process memory.

    Only accepted attempts are recorded; a rejected caller does not push its
    own window further out. State is lost on restart and is not shared
    between workers.
    """

    def __init__(self, window_ms: int = 60_000, max_requests: int = 5,
                 clock: Optional[Callable[[], float]] = None, sweep_every: int = 1000):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock or _now_ms
        self._sweep_every = sweep_every
        self._calls = 0
        self._hits: Dict[str, List[float]] = {}
        self._lock = Lock()

    def is_rate_limited(self, ip: str) -> bool:
        now = self._clock()
        with self._lock:
            self._calls += 1
            if self._sweep_every and self._calls % self._sweep_every == 0:
                self._sweep(now)

            recent = [t for t in self._hits.get(ip, []) if now - t < self.window_ms]
            self._hits[ip] = recent
            if len(recent) >= self.max_requests:
                LOG.warning("Rate limit hit for %s (%d in %dms)", ip, len(recent), self.window_ms)
                return True
            recent.append(now)
            return False

    def sweep(self) -> int:
        """Drop IPs with nothing left in the window. Returns how many were dropped."""
        with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        stale = [ip for ip, hits in self._hits.items()
                 if not any(now - t < self.window_ms for t in hits)]
        for ip in stale:
            del self._hits[ip]
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._calls = 0

    def __len__(self) -> int:
        return len(self._hits)


_limiter: Optional[SlidingWindowRateLimiter] = None

def get_rate_limiter() -> SlidingWindowRateLimiter:
    global _limiter
    if _limiter is None:
        s = get_settings()
        _limiter = SlidingWindowRateLimiter(window_ms=s.RATE_LIMIT_WINDOW_MS, max_requests=s.RATE_LIMIT_MAX)
    return _limiter
