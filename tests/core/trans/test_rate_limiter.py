"""Unit tests for core.trans.rate_limiter module."""

from __future__ import annotations

import threading

import pytest

from core.trans.rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now: float = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.mark.parametrize(("window", "max_requests"), [(0, 10), (-1.0, 10), (60.0, 0)])
def test_rejects_non_positive_limits(window: float, max_requests: int) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        SlidingWindowRateLimiter(window, max_requests)


def test_try_acquire_admits_up_to_ceiling(clock: FakeClock) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 3, clock=clock)

    assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]
    assert limiter.stats().total_requests_in_window == 3


def test_rejection_logs_warning(clock: FakeClock, caplog: pytest.LogCaptureFixture) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 1, clock=clock)
    limiter.try_acquire()

    assert limiter.try_acquire() is False
    assert any("Rate limit reached" in rec.message for rec in caplog.records)


def test_admission_resumes_after_window(clock: FakeClock) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 2, clock=clock)
    limiter.try_acquire()
    clock.now = 30.0
    limiter.try_acquire()

    clock.now = 59.0
    assert limiter.admit() is False

    # The first admission leaves the window exactly 60 seconds later.
    clock.now = 60.0
    assert limiter.admit() is True
    assert limiter.stats().total_requests_in_window == 1


def test_admit_does_not_record(clock: FakeClock) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 1, clock=clock)

    assert limiter.admit() is True
    assert limiter.admit() is True
    assert limiter.stats().total_requests_in_window == 0


def test_record_admission_keeps_window_bounded(clock: FakeClock) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 2, clock=clock)

    for _ in range(5):
        limiter.record_admission()

    stats = limiter.stats()
    assert stats.total_requests_in_window == 2
    assert stats.is_rate_limited is True


def test_stats_snapshot(clock: FakeClock) -> None:
    limiter = SlidingWindowRateLimiter(30.0, 5, clock=clock)
    limiter.try_acquire()

    stats = limiter.stats()

    assert stats.total_requests_in_window == 1
    assert stats.window_seconds == 30.0
    assert stats.max_requests == 5
    assert stats.is_rate_limited is False
    assert limiter.window == 30.0
    assert limiter.max_requests == 5


def test_concurrent_acquire_never_exceeds_ceiling() -> None:
    limiter = SlidingWindowRateLimiter(60.0, 50)
    admitted: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            result: bool = limiter.try_acquire()
            with lock:
                admitted.append(result)

    threads: list[threading.Thread] = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert admitted.count(True) == 50
    assert limiter.stats().total_requests_in_window == 50
