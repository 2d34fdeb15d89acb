# tests/test_rate_limiter.py
import pytest

from school_mgmt.core.rate_limiter import RateLimiter

pytestmark = pytest.mark.anyio


def test_rejects_non_positive_limits():
    with pytest.raises(ValueError):
        RateLimiter(max_requests=0, time_window=60)
    with pytest.raises(ValueError):
        RateLimiter(max_requests=5, time_window=0)


async def test_allows_up_to_limit_then_blocks():
    limiter = RateLimiter(max_requests=3, time_window=60)

    results = [await limiter.check_rate_limit("general:1.2.3.4", now=1000.0) for _ in range(4)]
    assert results == [True, True, True, False]


async def test_keys_are_counted_separately():
    limiter = RateLimiter(max_requests=1, time_window=60)

    assert await limiter.check_rate_limit("general:1.1.1.1", now=1000.0)
    assert await limiter.check_rate_limit("general:2.2.2.2", now=1000.0)
    assert not await limiter.check_rate_limit("general:1.1.1.1", now=1000.0)


async def test_window_resets_after_expiry():
    limiter = RateLimiter(max_requests=2, time_window=60)

    assert await limiter.check_rate_limit("k", now=1000.0)
    assert await limiter.check_rate_limit("k", now=1010.0)
    assert not await limiter.check_rate_limit("k", now=1059.0)
    # Fixed window: a new one opens at 1060
    assert await limiter.check_rate_limit("k", now=1060.0)


async def test_cleanup_drops_expired_buckets():
    limiter = RateLimiter(max_requests=2, time_window=10, cleanup_interval=0)
    limiter._last_cleanup = 0

    await limiter.check_rate_limit("old", now=1000.0)
    await limiter.check_rate_limit("new", now=1020.0)

    assert "old" not in limiter._buckets
    assert "new" in limiter._buckets


async def test_reset_forgets_one_key_or_all():
    limiter = RateLimiter(max_requests=1, time_window=60)
    await limiter.check_rate_limit("a", now=1000.0)
    await limiter.check_rate_limit("b", now=1000.0)

    limiter.reset("a")
    assert await limiter.check_rate_limit("a", now=1001.0)
    assert not await limiter.check_rate_limit("b", now=1001.0)

    limiter.reset()
    assert await limiter.check_rate_limit("b", now=1002.0)
