"""
Fixed-window rate limiting keyed by session id
"""
import logging
from datetime import datetime, timedelta
from typing import Dict

from .models import RateWindow

logger = logging.getLogger(__name__)


class RateLimiter:
    """Counts attempts per key inside a fixed time window"""

    def __init__(self, max_attempts: int = 10, time_window_seconds: float = 60):
        self.attempts: Dict[str, RateWindow] = {}
        self.max_attempts = max_attempts
        self.time_window = timedelta(seconds=time_window_seconds)

    def check_limit(self, key: str) -> bool:
        """
        Record an attempt for key.

        The incremented count is stored even when the limit is exceeded,
        so further calls in the same window keep failing.

        Returns:
            False if the attempt exceeds max_attempts, True otherwise
        """
        now = datetime.now()
        window = self.attempts.get(key)

        if window is None or now - window.window_start > self.time_window:
            window = RateWindow(count=0, window_start=now)

        window.count += 1
        self.attempts[key] = window

        if window.count > self.max_attempts:
            logger.warning(f"Rate limit exceeded for key: {key}")
            return False

        return True

    def reset(self, key: str) -> None:
        """Forget the window for key"""
        self.attempts.pop(key, None)

    def prune_expired(self) -> int:
        """Drop windows whose period has elapsed and return how many were dropped"""
        now = datetime.now()
        stale = [
            key for key, window in self.attempts.items()
            if now - window.window_start > self.time_window
        ]
        for key in stale:
            del self.attempts[key]
        return len(stale)
