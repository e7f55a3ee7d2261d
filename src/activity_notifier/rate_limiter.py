"""In-memory fixed-window rate limiter."""

from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from typing import Callable

from .types import RateLimitDecision, RateLimiterConfig, RateLimitRecord, RateLimitSnapshot


class RateLimiter:
    """Fixed-window request counter keyed by an arbitrary identity string.

    A window starts on the first check for a key and lasts ``window_ms``.
    Lapsed records are not evicted; the next check past ``reset_at`` starts
    a new window. Up to ``2 * max_requests`` calls can therefore succeed
    across a window boundary.
    """

    def __init__(
        self,
        config: RateLimiterConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or RateLimiterConfig()
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> RateLimiterConfig:
        return self._config

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def check(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` if the window has room."""
        window = self._config.window_secs
        limit = self._config.max_requests

        with self._lock:
            now = self._clock()
            record = self._records.get(key)
            if record is None:
                record = RateLimitRecord(count=0, reset_at=now + window)
                self._records[key] = record

            if now > record.reset_at:
                record.count = 0
                record.reset_at = now + window

            allowed = record.count < limit
            if allowed:
                record.count += 1

            return RateLimitDecision(
                allowed=allowed,
                current=record.count,
                max=limit,
                remaining=max(0, limit - record.count),
                reset_at=_to_datetime(record.reset_at),
                message=None if allowed else self._config.message,
            )

    def get_status(self, key: str) -> RateLimitSnapshot | None:
        """Return the current counter for ``key`` without consuming it."""
        limit = self._config.max_requests
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            now = self._clock()
            return RateLimitSnapshot(
                current=record.count,
                max=limit,
                remaining=max(0, limit - record.count),
                reset_at=_to_datetime(record.reset_at),
                time_remaining_ms=max(0, round((record.reset_at - now) * 1000)),
            )

    def remove(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


def _to_datetime(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)
