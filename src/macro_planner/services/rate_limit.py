"""Request rate limiting."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class RateLimiter(Protocol):
    """Rate limiter interface keyed by caller identity."""

    def check_and_increment(self, key: str) -> bool:
        """Count a request and return False once the key is over its limit."""


@dataclass
class _Window:
    count: int
    expires_at: datetime


class InMemoryRateLimiter(RateLimiter):
    """Fixed-window limiter for a single process."""

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: dict[str, _Window] = {}

    def check_and_increment(self, key: str) -> bool:
        """Count a request in the key's current window."""
        now = datetime.now(tz=UTC)
        window = self._windows.get(key)
        if window is None or now >= window.expires_at:
            window = _Window(
                count=0, expires_at=now + timedelta(seconds=self.window_seconds)
            )
            self._windows[key] = window
        if window.count >= self.max_requests:
            return False
        window.count += 1
        return True
