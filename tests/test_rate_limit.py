import pytest

from topwallets_bot.utils.rate_limit import RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_rate_limiter_allows_within_limit():
    limiter = RateLimiter(limit_per_minute=2)
    assert limiter.allow(1)
    assert limiter.allow(1)
    assert not limiter.allow(1)


def test_rate_limiter_keys_are_independent():
    limiter = RateLimiter(limit_per_minute=1)
    assert limiter.allow(1)
    assert limiter.allow(2)
    assert not limiter.allow(1)


def test_rate_limiter_expires():
    clock = FakeClock()
    limiter = RateLimiter(limit_per_minute=1, clock=clock)
    assert limiter.allow(2)
    assert not limiter.allow(2)

    clock.now = 61.0
    assert limiter.allow(2)


def test_retry_after():
    clock = FakeClock()
    limiter = RateLimiter(limit_per_minute=1, clock=clock)
    assert limiter.retry_after(3) == 0.0

    limiter.allow(3)
    clock.now = 20.0
    assert limiter.retry_after(3) == pytest.approx(40.0)


def test_rate_limiter_rejects_zero_limit():
    with pytest.raises(ValueError):
        RateLimiter(limit_per_minute=0)
