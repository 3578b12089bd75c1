import pytest

from services.rate_limit import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_burst_then_rejects():
    clock = FakeClock()
    limiter = RateLimiter(3, clock=clock)
    assert [limiter.check("1.2.3.4") for _ in range(4)] == [True, True, True, False]


def test_quota_replenishes_one_request_per_interval():
    clock = FakeClock()
    limiter = RateLimiter(2, clock=clock)
    assert limiter.check("a") and limiter.check("a")
    assert not limiter.check("a")

    clock.now += 29.0
    assert not limiter.check("a")
    clock.now += 1.0
    assert limiter.check("a")
    assert not limiter.check("a")


def test_clients_are_limited_independently():
    limiter = RateLimiter(1, clock=FakeClock())
    assert limiter.check("a")
    assert not limiter.check("a")
    assert limiter.check("b")


def test_unknown_client_is_never_limited():
    limiter = RateLimiter(1, clock=FakeClock())
    assert all(limiter.check(None) for _ in range(10))


def test_idle_clients_are_pruned():
    clock = FakeClock()
    limiter = RateLimiter(60, clock=clock, prune_every=2)
    limiter.check("a")
    assert len(limiter) == 1
    clock.now += 120.0
    limiter.check("b")  # second check triggers pruning before "b" is recorded
    assert len(limiter) == 1


def test_requests_per_minute_must_be_positive():
    with pytest.raises(ValueError):
        RateLimiter(0)
