"""Unit tests for the per-client submission limiter."""

from veritas.api.rate_limit import SubmissionRateLimiter


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_limit_is_per_client_and_slides():
    clock = Clock()
    limiter = SubmissionRateLimiter(2, time_fn=clock)
    assert limiter.allow("a") and limiter.allow("a")
    assert not limiter.allow("a")
    assert limiter.allow("b")

    clock.now = 60.0
    assert limiter.allow("a")


def test_idle_clients_are_forgotten():
    clock = Clock()
    limiter = SubmissionRateLimiter(5, time_fn=clock)
    limiter.allow("a")
    limiter.allow("b")
    assert set(limiter.history) == {"a", "b"}

    clock.now = 61.0
    limiter.allow("c")
    assert set(limiter.history) == {"c"}


def test_active_clients_survive_the_sweep():
    clock = Clock()
    limiter = SubmissionRateLimiter(5, time_fn=clock)
    limiter.allow("a")
    clock.now = 30.0
    limiter.allow("b")

    clock.now = 61.0
    limiter.allow("c")
    assert set(limiter.history) == {"b", "c"}
