import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time_ms: int
    limit: int

    def retry_after_seconds(self, now_ms: int) -> int:
        return max(1, math.ceil((self.reset_time_ms - now_ms) / 1000))


@dataclass
class _Window:
    count: int
    reset_time_ms: int


class RateLimiter:
    """Fixed-window request counter keyed by an arbitrary identifier (caller IP).

    Thread-safe; entries only disappear when :meth:`cleanup` is called.
    """

    def __init__(
        self,
        max_requests: int = 50,
        window_ms: int = 60_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def check(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed."""
        now = self.now_ms()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_time_ms:
                window = _Window(count=1, reset_time_ms=now + self.window_ms)
                self._windows[key] = window
                return RateLimitResult(True, self.max_requests - 1, window.reset_time_ms, self.max_requests)

            if window.count >= self.max_requests:
                return RateLimitResult(False, 0, window.reset_time_ms, self.max_requests)

            window.count += 1
            return RateLimitResult(
                True,
                self.max_requests - window.count,
                window.reset_time_ms,
                self.max_requests,
            )

    def cleanup(self) -> int:
        """Evict every window whose reset time has passed. Returns the number evicted."""
        now = self.now_ms()
        with self._lock:
            expired = [key for key, window in self._windows.items() if now > window.reset_time_ms]
            for key in expired:
                del self._windows[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


class RateLimitExceededError(Exception):
    """Raised when a caller exceeds the configured request rate."""

    def __init__(self, result: RateLimitResult, retry_after_seconds: int) -> None:
        super().__init__("Too many requests. Please try again later.")
        self.result = result
        self.retry_after_seconds = retry_after_seconds
