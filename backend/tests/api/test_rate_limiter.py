"""Fixed window rate limiter — window arithmetic against a fake clock.

Invariants:
    - max_requests allowed per window; the next one is refused with remaining 0
    - A new window starts once window_seconds have elapsed since the first hit
    - Expired windows are swept, keeping the client table bounded
"""

from postboard.api.middleware.rate_limit import FixedWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_budget_then_refuses():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=900, clock=clock)

    decisions = [limiter.hit("1.2.3.4") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]
    assert decisions[-1].reset_after == 900


def test_reset_after_counts_down():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=900, clock=clock)
    limiter.hit("a")
    clock.now += 600.2
    assert limiter.hit("a").reset_after == 300


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
    assert limiter.hit("a").allowed
    assert not limiter.hit("a").allowed
    clock.now += 60
    assert limiter.hit("a").allowed


def test_clients_are_independent():
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed


def test_expired_windows_are_swept():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, clock=clock)
    for i in range(10):
        limiter.hit(f"client-{i}")
    assert limiter.tracked_clients() == 10

    clock.now += 61
    limiter.hit("late")
    assert limiter.tracked_clients() == 1


def test_headers():
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=FakeClock())
    assert limiter.hit("a").headers() == {
        "RateLimit-Limit": "2",
        "RateLimit-Remaining": "1",
        "RateLimit-Reset": "60",
    }
