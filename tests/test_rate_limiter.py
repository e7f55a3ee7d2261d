"""RateLimiter unit tests."""

import threading
import time

import pytest

from activity_notifier import NotifierError, NotifierErrorCodes, RateLimiter, RateLimiterConfig


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


def make_limiter(max_requests: int = 3, window_ms: int = 1000) -> tuple[RateLimiter, FakeClock]:
    clock = FakeClock()
    limiter = RateLimiter(
        RateLimiterConfig(max_requests=max_requests, window_ms=window_ms, message="slow down"),
        clock=clock,
    )
    return limiter, clock


def test_defaults() -> None:
    limiter = RateLimiter()
    assert limiter.config.max_requests == 10
    assert limiter.config.window_ms == 60000
    assert limiter.config.message == "Too many requests, please try again later."


def test_first_calls_allowed_then_denied() -> None:
    limiter, _ = make_limiter()
    decisions = [limiter.check("u") for _ in range(3)]
    assert [d.allowed for d in decisions] == [True, True, True]
    assert [d.current for d in decisions] == [1, 2, 3]
    assert [d.remaining for d in decisions] == [2, 1, 0]
    assert all(d.message is None for d in decisions)

    denied = limiter.check("u")
    assert denied.allowed is False
    assert denied.current == 3
    assert denied.remaining == 0
    assert denied.max == 3
    assert denied.message == "slow down"


def test_denied_check_does_not_extend_window() -> None:
    limiter, clock = make_limiter()
    first = limiter.check("u")
    for _ in range(3):
        limiter.check("u")
    clock.advance_ms(500)
    denied = limiter.check("u")
    assert denied.reset_at == first.reset_at


def test_window_rollover() -> None:
    limiter, clock = make_limiter()
    for _ in range(4):
        limiter.check("u")
    clock.advance_ms(1100)
    decision = limiter.check("u")
    assert decision.allowed is True
    assert decision.current == 1


def test_window_not_reset_exactly_at_boundary() -> None:
    limiter, clock = make_limiter(max_requests=1)
    limiter.check("u")
    clock.advance_ms(1000)
    assert limiter.check("u").allowed is False
    clock.advance_ms(1)
    assert limiter.check("u").allowed is True


def test_boundary_double_burst_is_allowed() -> None:
    limiter, clock = make_limiter(max_requests=3, window_ms=1000)
    limiter.check("u")
    clock.advance_ms(999)
    assert all(limiter.check("u").allowed for _ in range(2))
    clock.advance_ms(2)
    assert all(limiter.check("u").allowed for _ in range(3))


def test_remove_starts_fresh() -> None:
    limiter, _ = make_limiter()
    for _ in range(3):
        limiter.check("u")
    limiter.remove("u")
    assert limiter.get_status("u") is None
    assert limiter.check("u").current == 1


def test_remove_unknown_key_is_noop() -> None:
    limiter, _ = make_limiter()
    limiter.remove("nobody")
    assert len(limiter) == 0


def test_clear_resets_every_key() -> None:
    limiter, _ = make_limiter()
    for key in ("a", "b", "c"):
        limiter.check(key)
        limiter.check(key)
    limiter.clear()
    assert len(limiter) == 0
    for key in ("a", "b", "c"):
        assert limiter.check(key).current == 1


def test_keys_are_independent() -> None:
    limiter, _ = make_limiter(max_requests=1)
    assert limiter.check("a").allowed is True
    assert limiter.check("a").allowed is False
    decision = limiter.check("b")
    assert decision.allowed is True
    assert decision.current == 1


def test_get_status_unseen_key() -> None:
    limiter, _ = make_limiter()
    assert limiter.get_status("u") is None


def test_get_status_does_not_consume() -> None:
    limiter, clock = make_limiter()
    limiter.check("u")
    clock.advance_ms(400)
    status = limiter.get_status("u")
    assert status is not None
    assert status.current == 1
    assert status.max == 3
    assert status.remaining == 2
    assert status.time_remaining_ms == 600
    assert limiter.get_status("u") == status
    assert limiter.check("u").current == 2


def test_get_status_time_remaining_floors_at_zero() -> None:
    limiter, clock = make_limiter()
    limiter.check("u")
    clock.advance_ms(5000)
    status = limiter.get_status("u")
    assert status is not None
    assert status.time_remaining_ms == 0
    assert status.current == 1


def test_instances_do_not_share_state() -> None:
    first, _ = make_limiter(max_requests=1)
    second, _ = make_limiter(max_requests=1)
    first.check("u")
    assert second.check("u").allowed is True


def test_concurrent_checks_never_exceed_limit() -> None:
    limiter = RateLimiter(RateLimiterConfig(max_requests=50, window_ms=60000))
    allowed: list[bool] = []
    guard = threading.Lock()
    barrier = threading.Barrier(16)

    def worker() -> None:
        barrier.wait()
        for _ in range(20):
            decision = limiter.check("shared")
            with guard:
                allowed.append(decision.allowed)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert allowed.count(True) == 50
    assert len(allowed) == 320


def test_real_clock_rollover() -> None:
    limiter = RateLimiter(RateLimiterConfig(max_requests=3, window_ms=1000))
    assert [limiter.check("u").current for _ in range(3)] == [1, 2, 3]
    assert limiter.check("u").allowed is False
    time.sleep(1.1)
    decision = limiter.check("u")
    assert decision.allowed is True
    assert decision.current == 1


@pytest.mark.parametrize(
    ("max_requests", "window_ms"),
    [(0, 1000), (-1, 1000), (5, 0), (5, -10)],
)
def test_invalid_config(max_requests: int, window_ms: int) -> None:
    with pytest.raises(NotifierError) as exc_info:
        RateLimiterConfig(max_requests=max_requests, window_ms=window_ms)
    assert exc_info.value.code == NotifierErrorCodes.INVALID_CONFIG
