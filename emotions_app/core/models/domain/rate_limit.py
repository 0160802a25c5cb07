"""
In-process attempt limiter used to throttle signups.

Each key (normalised email) may make ``max_attempts`` attempts; the counter
is cleared once the most recent attempt is older than ``window``. Times come
from an injectable clock so behaviour can be checked without sleeping.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Attempts:
    count: int
    last_attempt: datetime


class AttemptRateLimiter:
    def __init__(
        self,
        max_attempts: int = 5,
        window: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock
        self._attempts: Dict[str, _Attempts] = {}
        self._lock = threading.Lock()

    def _purge_expired(self, now: datetime) -> None:
        expired = [key for key, rec in self._attempts.items() if now - rec.last_attempt > self.window]
        for key in expired:
            del self._attempts[key]

    def check(self, key: str) -> bool:
        """Record an attempt for ``key``; return False when the limit is already reached."""
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            record = self._attempts.get(key)
            if record is None:
                self._attempts[key] = _Attempts(count=1, last_attempt=now)
                return True
            if record.count >= self.max_attempts:
                return False
            record.count += 1
            record.last_attempt = now
            return True

    def remaining_attempts(self, key: str) -> int:
        with self._lock:
            record = self._attempts.get(key)
            if record is None or self._clock() - record.last_attempt > self.window:
                return self.max_attempts
            return max(0, self.max_attempts - record.count)

    def timeout_remaining(self, key: str) -> int:
        """Seconds until ``key`` may try again (0 when not blocked)."""
        with self._lock:
            record = self._attempts.get(key)
            if record is None or record.count < self.max_attempts:
                return 0
            left = (record.last_attempt + self.window - self._clock()).total_seconds()
            return max(0, math.ceil(left))

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)
