"""Submission rate limiting and suspicious-activity detection.

Two independent signals per (purpose, identity):

- a hard attempt counter that expires `decay_seconds` after the first
  attempt of its window
- a rolling log of the 10 most recent accepted attempts, used to spot
  bursts (3 within 5 minutes) and rapid repeats (under 30 seconds)

Check-and-record for one key runs under that key's lock, so two
concurrent requests at the boundary cannot both be admitted.
"""

import asyncio
import logging
import math
import time
import weakref
from collections.abc import Callable

from trustgate.cache import TTLCache
from trustgate.config import RateLimitOptions
from trustgate.schemas import ACCEPTED, FailureCode, ValidationOutcome

logger = logging.getLogger("trustgate-rate-limit")

ACTIVITY_LOG_SIZE = 10
ACTIVITY_LOG_TTL_SECONDS = 3600
BURST_WINDOW_SECONDS = 300
BURST_THRESHOLD = 3
MIN_INTERVAL_SECONDS = 30


class SubmissionRateLimiter:
    """Per-identity attempt limiter backed by a TTL cache."""

    def __init__(self, cache: TTLCache, clock: Callable[[], float] = time.time):
        """Initialize the limiter.

        Args:
            cache: Shared TTL cache holding counters and activity logs.
            clock: Returns the current unix time in seconds.
        """
        self.cache = cache
        self._clock = clock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @staticmethod
    def key_for(purpose: str, identity: str) -> str:
        """Cache key shared by counter and activity log."""
        return f"{purpose}:{identity}"

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def check_and_record(
        self,
        identity: str,
        purpose: str,
        options: RateLimitOptions | None = None,
    ) -> ValidationOutcome:
        """Reject if over budget or suspicious; otherwise record the attempt."""
        options = options or RateLimitOptions()
        key = self.key_for(purpose, identity)
        lock = self._lock_for(key)

        async with lock:
            now = self._clock()
            counter_key = f"rate:{key}"
            activity_key = f"activity:{key}"

            window, found = await self.cache.get(counter_key)
            if found and window["count"] >= options.max_attempts:
                remaining = window["started_at"] + options.decay_seconds - now
                retry_after = max(1, math.ceil(remaining))
                logger.info(f"Rate limit reached for {key}, retry in {retry_after}s")
                return ValidationOutcome.reject(
                    FailureCode.RATE_LIMITED,
                    f"Too many submissions. Please try again in {retry_after} seconds.",
                    retry_after=retry_after,
                )

            timestamps, _ = await self.cache.get(activity_key)
            timestamps = [
                t for t in (timestamps or []) if now - t <= ACTIVITY_LOG_TTL_SECONDS
            ]

            if options.detect_suspicious_activity and self._is_suspicious(timestamps, now):
                logger.warning(f"Suspicious submission pattern for {key}")
                return ValidationOutcome.reject(
                    FailureCode.SUSPICIOUS_SUBMISSION_PATTERN,
                    "Submissions are arriving too quickly. Please slow down.",
                )

            if found:
                window = {"count": window["count"] + 1, "started_at": window["started_at"]}
                ttl = window["started_at"] + options.decay_seconds - now
            else:
                window = {"count": 1, "started_at": now}
                ttl = options.decay_seconds
            await self.cache.set(counter_key, window, ttl)

            timestamps.append(now)
            await self.cache.set(
                activity_key, timestamps[-ACTIVITY_LOG_SIZE:], ACTIVITY_LOG_TTL_SECONDS
            )
            return ACCEPTED

    @staticmethod
    def _is_suspicious(timestamps: list[float], now: float) -> bool:
        """Burst of attempts (counting this one) or a rapid repeat."""
        if not timestamps:
            return False
        recent = [t for t in timestamps if now - t < BURST_WINDOW_SECONDS]
        if len(recent) + 1 >= BURST_THRESHOLD:
            return True
        return now - timestamps[-1] < MIN_INTERVAL_SECONDS

    async def attempts(self, identity: str, purpose: str) -> int:
        """Attempts recorded in the current window."""
        window, found = await self.cache.get(f"rate:{self.key_for(purpose, identity)}")
        return window["count"] if found else 0

    async def reset(self, identity: str, purpose: str) -> None:
        """Clear the counter and activity log for one identity."""
        key = self.key_for(purpose, identity)
        async with self._lock_for(key):
            await self.cache.delete(f"rate:{key}")
            await self.cache.delete(f"activity:{key}")
