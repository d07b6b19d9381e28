from threading import Thread
from types import SimpleNamespace

import pytest

from taskflow.auth.rate_limiter import BucketPool, RateLimiterService, TokenBucket, get_client_ip


class _FakeRequest:
    def __init__(self, headers=None, host: str | None = '10.0.0.9'):
        self.headers = headers or {}
        self.client = SimpleNamespace(host=host) if host else None


def test_bucket_allows_capacity_then_rejects_within_interval(fake_clock) -> None:
    bucket = TokenBucket(5, 60, clock=fake_clock)

    results = [bucket.try_consume() for _ in range(6)]

    assert results == [True, True, True, True, True, False]


def test_bucket_refills_to_capacity_only_after_full_interval(fake_clock) -> None:
    bucket = TokenBucket(5, 60, clock=fake_clock)
    for _ in range(5):
        bucket.try_consume()

    fake_clock.advance(59)
    assert bucket.try_consume() is False

    fake_clock.advance(1)
    assert bucket.available_tokens == 5


def test_bucket_refill_does_not_accumulate_past_capacity(fake_clock) -> None:
    bucket = TokenBucket(3, 60, clock=fake_clock)
    bucket.try_consume()

    fake_clock.advance(600)

    assert bucket.available_tokens == 3


def test_pools_are_independent_per_client_and_per_endpoint(fake_clock) -> None:
    limiter = RateLimiterService(auth_requests_per_minute=1, refresh_requests_per_minute=2, clock=fake_clock)

    assert limiter.resolve_bucket('1.1.1.1').try_consume() is True
    assert limiter.resolve_bucket('1.1.1.1').try_consume() is False
    assert limiter.resolve_bucket('2.2.2.2').try_consume() is True
    assert limiter.resolve_refresh_bucket('1.1.1.1').try_consume() is True
    assert limiter.resolve_refresh_bucket('1.1.1.1').try_consume() is True
    assert limiter.resolve_refresh_bucket('1.1.1.1').try_consume() is False


def test_pool_creates_one_bucket_per_key_under_concurrency() -> None:
    pool = BucketPool(5)
    resolved = []

    threads = [Thread(target=lambda: resolved.append(pool.resolve('1.1.1.1'))) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(pool) == 1
    assert all(bucket is resolved[0] for bucket in resolved)


@pytest.mark.parametrize(
    ('headers', 'expected'),
    [
        ({'X-Forwarded-For': '203.0.113.5, 10.0.0.1'}, '203.0.113.5'),
        ({'X-Forwarded-For': 'unknown', 'X-Real-IP': '198.51.100.7'}, '198.51.100.7'),
        ({'X-Forwarded-For': '', 'X-Real-IP': 'UNKNOWN'}, '10.0.0.9'),
        ({'X-Real-IP': '198.51.100.7'}, '198.51.100.7'),
        ({}, '10.0.0.9'),
    ],
)
def test_get_client_ip_prefers_forwarded_headers(headers: dict, expected: str) -> None:
    assert get_client_ip(_FakeRequest(headers=headers)) == expected


def test_get_client_ip_without_socket_address() -> None:
    assert get_client_ip(_FakeRequest(host=None)) == 'unknown'
