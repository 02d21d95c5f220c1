"""
Tests for the per-user sliding-window rate limiter.
"""

import threading

import fakeredis
import pytest

from tripgen.rate_limit.limiter import (
    RateLimitExceeded,
    RateWindow,
    SlidingWindowRateLimiter,
)
from tripgen.rate_limit.redis_limiter import RedisSlidingWindowRateLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


def _redis_client(server):
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture(params=["memory", "redis"])
def limiter(request, clock, redis_server):
    if request.param == "redis":
        return RedisSlidingWindowRateLimiter(_redis_client(redis_server), clock=clock)
    return SlidingWindowRateLimiter(clock=clock)


class TestSlidingWindowRateLimiter:
    """Tests for admission decisions, run against both backends."""

    def test_sixth_request_in_an_hour_is_denied(self, limiter, clock):
        for _ in range(5):
            assert limiter.check_and_increment(1).allowed is True
            clock.advance(60)

        decision = limiter.check_and_increment(1)

        assert decision.allowed is False
        assert isinstance(decision.exceeded, RateLimitExceeded)
        assert decision.exceeded.window == "hour"
        assert decision.exceeded.limit == 5
        # First admission was 300s ago, so it leaves the hour window in 3300s.
        assert decision.exceeded.retry_after_seconds == pytest.approx(3300)

    def test_denied_requests_are_not_recorded(self, limiter, clock):
        for _ in range(5):
            limiter.check_and_increment(1)
        for _ in range(3):
            assert limiter.check_and_increment(1).allowed is False

        clock.advance(3601)

        assert limiter.remaining(1)["hour"] == 5
        assert limiter.remaining(1)["day"] == 45

    def test_window_slides(self, limiter, clock):
        limiter.check_and_increment(1)
        clock.advance(1800)
        for _ in range(4):
            limiter.check_and_increment(1)
        assert limiter.check_and_increment(1).allowed is False

        # The first admission drops out of the hour window; the other four remain.
        clock.advance(1801)

        assert limiter.check_and_increment(1).allowed is True
        assert limiter.check_and_increment(1).allowed is False

    def test_daily_limit(self, limiter, clock):
        for _ in range(50):
            assert limiter.check_and_increment(1).allowed is True
            clock.advance(721)

        decision = limiter.check_and_increment(1)

        assert decision.allowed is False
        assert decision.exceeded.window == "day"

    def test_users_are_independent(self, limiter):
        for _ in range(5):
            limiter.check_and_increment(1)

        assert limiter.check_and_increment(1).allowed is False
        assert limiter.check_and_increment(2).allowed is True

    def test_remaining(self, limiter):
        assert limiter.remaining(7) == {"hour": 5, "day": 50}
        limiter.check_and_increment(7)
        assert limiter.remaining(7) == {"hour": 4, "day": 49}

    def test_reset(self, limiter):
        for _ in range(5):
            limiter.check_and_increment(1)
        limiter.check_and_increment(2)

        limiter.reset(1)
        assert limiter.check_and_increment(1).allowed is True
        assert limiter.remaining(2)["hour"] == 4

        limiter.reset()
        assert limiter.remaining(2)["hour"] == 5

    def test_custom_windows(self, clock):
        limiter = SlidingWindowRateLimiter(windows=[RateWindow("minute", 60, 1)], clock=clock)

        assert limiter.check_and_increment("alice").allowed is True
        assert limiter.check_and_increment("alice").allowed is False
        clock.advance(60)
        assert limiter.check_and_increment("alice").allowed is True

    def test_requires_a_window(self):
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(windows=[])

    def test_concurrent_requests_never_over_admit(self, limiter):
        """Many threads racing for one user admit exactly the hourly limit."""
        start = threading.Barrier(20)
        results = []
        results_lock = threading.Lock()

        def request():
            start.wait()
            decision = limiter.check_and_increment(42)
            with results_lock:
                results.append(decision.allowed)

        threads = [threading.Thread(target=request) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 5
        assert results.count(False) == 15


class TestInMemoryBookkeeping:
    def test_idle_users_are_swept(self, clock):
        limiter = SlidingWindowRateLimiter(clock=clock)
        limiter.check_and_increment(1)
        limiter.check_and_increment(2)

        clock.advance(86400)
        limiter.check_and_increment(3)

        assert set(limiter._admissions) == {3}

    def test_lookups_do_not_track_users(self):
        limiter = SlidingWindowRateLimiter(clock=FakeClock())

        limiter.remaining(9)

        assert limiter._admissions == {}


class TestRedisSlidingWindowRateLimiter:
    def test_processes_share_one_count(self, clock, redis_server):
        """Two API processes pointed at the same Redis enforce a single quota."""
        first = RedisSlidingWindowRateLimiter(_redis_client(redis_server), clock=clock)
        second = RedisSlidingWindowRateLimiter(_redis_client(redis_server), clock=clock)

        for _ in range(3):
            assert first.check_and_increment(1).allowed is True
        for _ in range(2):
            assert second.check_and_increment(1).allowed is True

        decision = second.check_and_increment(1)

        assert decision.allowed is False
        assert decision.exceeded.window == "hour"
        assert first.remaining(1)["hour"] == 0

    def test_user_key_expires_after_longest_window(self, clock, redis_server):
        client = _redis_client(redis_server)
        limiter = RedisSlidingWindowRateLimiter(client, clock=clock, key_prefix="test:rl")

        limiter.check_and_increment(4)

        assert client.ttl("test:rl:4") == 86400
        assert client.zcard("test:rl:4") == 1

    def test_old_admissions_are_trimmed(self, clock, redis_server):
        client = _redis_client(redis_server)
        limiter = RedisSlidingWindowRateLimiter(client, clock=clock, key_prefix="test:rl")
        limiter.check_and_increment(4)

        clock.advance(86400)
        limiter.check_and_increment(4)

        assert client.zcard("test:rl:4") == 1

    def test_concurrent_processes_never_over_admit(self, clock, redis_server):
        """Each thread has its own connection, as separate API processes would."""
        limiters = [
            RedisSlidingWindowRateLimiter(_redis_client(redis_server), clock=clock)
            for _ in range(20)
        ]
        start = threading.Barrier(20)
        results = []
        results_lock = threading.Lock()

        def request(limiter):
            start.wait()
            decision = limiter.check_and_increment(42)
            with results_lock:
                results.append(decision.allowed)

        threads = [threading.Thread(target=request, args=(l,)) for l in limiters]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 5
        assert limiters[0].remaining(42)["hour"] == 0
