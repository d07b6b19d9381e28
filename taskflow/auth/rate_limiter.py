"""Per client IP throttling for the authentication endpoints.

Buckets refill in one step: once a full interval has passed since the last
refill the bucket is back at capacity. Buckets live for the life of the process.
"""

import time
from threading import Lock
from typing import Callable

from fastapi import Request

from taskflow.core import config

UNKNOWN_ADDRESS = "unknown"


class TokenBucket:
    def __init__(self, capacity: int, interval_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.capacity = capacity
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._tokens = capacity
        self._last_refill = clock()
        self._lock = Lock()

    def _refill(self) -> None:
        elapsed = self._clock() - self._last_refill
        if elapsed < self.interval_seconds:
            return
        periods = int(elapsed // self.interval_seconds)
        self._last_refill += periods * self.interval_seconds
        self._tokens = self.capacity

    def try_consume(self, tokens: int = 1) -> bool:
        with self._lock:
            self._refill()
            if self._tokens < tokens:
                return False
            self._tokens -= tokens
            return True

    @property
    def available_tokens(self) -> int:
        with self._lock:
            self._refill()
            return self._tokens


class BucketPool:
    """Lazily created buckets keyed by client, all sharing one configuration."""

    def __init__(self, capacity: int, interval_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.capacity = capacity
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = Lock()

    def resolve(self, key: str) -> TokenBucket:
        bucket = self._buckets.get(key)
        if bucket is not None:
            return bucket

        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(self.capacity, self.interval_seconds, clock=self._clock)
                self._buckets[key] = bucket
            return bucket

    def __len__(self) -> int:
        return len(self._buckets)


class RateLimiterService:
    def __init__(
        self,
        auth_requests_per_minute: int = config.RATE_LIMIT_AUTH_REQUESTS_PER_MINUTE,
        refresh_requests_per_minute: int = config.RATE_LIMIT_REFRESH_REQUESTS_PER_MINUTE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.auth_pool = BucketPool(auth_requests_per_minute, clock=clock)
        self.refresh_pool = BucketPool(refresh_requests_per_minute, clock=clock)

    def resolve_bucket(self, key: str) -> TokenBucket:
        """Bucket shared by register and login."""
        return self.auth_pool.resolve(key)

    def resolve_refresh_bucket(self, key: str) -> TokenBucket:
        return self.refresh_pool.resolve(key)


def _usable(value: str | None) -> bool:
    return bool(value) and value.strip().lower() != UNKNOWN_ADDRESS


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if _usable(forwarded_for):
        first_hop = forwarded_for.split(",")[0].strip()
        if _usable(first_hop):
            return first_hop

    real_ip = request.headers.get("X-Real-IP")
    if _usable(real_ip):
        return real_ip.strip()

    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_ADDRESS
