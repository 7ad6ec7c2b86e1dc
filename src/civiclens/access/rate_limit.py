"""
/**
 * @file rate_limit.py
 * @summary Fixed-window request limiter keyed by user or client address.
 *
 * @details
 * - Two windows per key: one minute and one day. The day window is skipped
 *   for tiers with an unlimited (-1) daily allowance.
 * - A denied request is not counted.
 * - Expired entries are swept lazily, at most once per cleanup interval.
 * - In-memory and per-process; single event loop, so no locking.
 */
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from civiclens.access.tiers import RATE_LIMITS, RateLimitConfig, Tier

logger = logging.getLogger(__name__)

MINUTE_WINDOW = 60
DAY_WINDOW = 24 * 60 * 60


@dataclass
class RateLimitEntry:
    count: int
    window_start: float


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    retry_after_ms: Optional[int] = None


class RateLimiter:
    """
    /**
     * Per-key request counters for the minute and day windows.
     *
     * @param limits: Per-tier allowances.
     * @param clock: Time source in seconds.
     * @param cleanup_interval: Minimum seconds between expiry sweeps.
     */
    """

    def __init__(self, limits: Mapping[Tier, RateLimitConfig] = RATE_LIMITS,
                 clock: Callable[[], float] = time.time, cleanup_interval: float = 300):
        self.limits = limits
        self.clock = clock
        self.cleanup_interval = cleanup_interval
        self.minute_entries: Dict[str, RateLimitEntry] = {}
        self.day_entries: Dict[str, RateLimitEntry] = {}
        self._last_cleanup = clock()

    def _cleanup(self, now: float):
        if now - self._last_cleanup < self.cleanup_interval:
            return
        self._last_cleanup = now

        for store, window in ((self.minute_entries, MINUTE_WINDOW), (self.day_entries, DAY_WINDOW)):
            expired = [k for k, e in store.items() if now - e.window_start > window]
            for key in expired:
                del store[key]
            if expired:
                logger.debug(f"Swept {len(expired)} expired rate-limit entries")

    @staticmethod
    def _current(store: Dict[str, RateLimitEntry], key: str, now: float, window: int) -> RateLimitEntry:
        entry = store.get(key)
        if entry is None or now - entry.window_start > window:
            entry = RateLimitEntry(count=0, window_start=now)
            store[key] = entry
        return entry

    def check_rate_limit(self, key: str, tier: Tier) -> RateLimitResult:
        """
        /**
         * Count one request for the key if both windows have room.
         *
         * @return RateLimitResult; retry_after_ms is set only on denial.
         */
        """
        now = self.clock()
        self._cleanup(now)
        limits = self.limits[Tier(tier)]

        minute = self._current(self.minute_entries, key, now, MINUTE_WINDOW)
        if minute.count >= limits.requests_per_minute:
            return RateLimitResult(
                allowed=False,
                remaining=0,
                limit=limits.requests_per_minute,
                retry_after_ms=int((MINUTE_WINDOW - (now - minute.window_start)) * 1000),
            )

        if limits.requests_per_day > 0:
            day = self._current(self.day_entries, key, now, DAY_WINDOW)
            if day.count >= limits.requests_per_day:
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    limit=limits.requests_per_day,
                    retry_after_ms=int((DAY_WINDOW - (now - day.window_start)) * 1000),
                )
            day.count += 1

        minute.count += 1
        return RateLimitResult(
            allowed=True,
            remaining=limits.requests_per_minute - minute.count,
            limit=limits.requests_per_minute,
        )

    def reset(self):
        self.minute_entries.clear()
        self.day_entries.clear()


def rate_limit_key(user_id: Optional[str] = None, forwarded_for: Optional[str] = None,
                   client_host: Optional[str] = None) -> str:
    """
    /**
     * Signed-in callers are limited per user, everyone else per address
     * (first X-Forwarded-For hop, then the socket peer).
     */
    """
    if user_id:
        return f"user:{user_id}"
    ip = (forwarded_for or "").split(",")[0].strip() or client_host or "unknown"
    return f"ip:{ip}"
