import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from testsuites.ui_testing.framework.wait_helpers import (
    ElementNotFoundError,
    WaitCondition,
    Waiter,
    WaitTimeoutError,
)


class FakeClock:
    """Monotonic clock advanced only by the waiter's sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _waiter(clock: FakeClock, **kwargs) -> Waiter:
    return Waiter(object(), clock=clock, sleep=clock.sleep, **kwargs)


class CountingPredicate:
    """False until the k-th evaluation, then a truthy value."""

    def __init__(self, k: int, result="ready"):
        self.k = k
        self.result = result
        self.calls = 0

    def __call__(self, session):
        self.calls += 1
        return self.result if self.calls >= self.k else None


@pytest.mark.parametrize("timeout,poll", [(1.0, 0.1), (5.0, 0.5), (2.0, 0.3), (0.5, 0.5), (10, 3)])
def test_always_false_expires_between_timeout_and_timeout_plus_poll(timeout, poll):
    clock = FakeClock()

    with pytest.raises(WaitTimeoutError) as exc_info:
        _waiter(clock, timeout=timeout, poll_interval=poll).until(lambda s: False)

    assert timeout <= clock.now <= timeout + poll
    assert exc_info.value.last_state is False
    assert exc_info.value.attempts >= 2


@pytest.mark.parametrize("k", [1, 2, 5, 9])
def test_true_on_kth_evaluation_returns_on_that_evaluation(k):
    clock = FakeClock()
    predicate = CountingPredicate(k)

    result = _waiter(clock, timeout=10, poll_interval=1).until(predicate)

    assert result == "ready"
    assert predicate.calls == k
    assert len(clock.sleeps) == k - 1


def test_sleep_never_overshoots_deadline():
    clock = FakeClock()

    with pytest.raises(WaitTimeoutError):
        _waiter(clock, timeout=1.0, poll_interval=0.375).until(lambda s: False)

    assert clock.sleeps == [0.375, 0.375, 0.25]
    assert clock.now == 1.0


def test_not_found_yet_is_retried():
    clock = FakeClock()
    calls = []

    def appears_on_third_poll(session):
        calls.append(1)
        if len(calls) < 3:
            raise ElementNotFoundError("#late")
        return "element"

    assert _waiter(clock, timeout=5, poll_interval=0.5).until(appears_on_third_poll) == "element"
    assert len(calls) == 3


def test_playwright_timeout_is_retried():
    clock = FakeClock()
    predicate = CountingPredicate(2)

    def flaky(session):
        if predicate(session) is None:
            raise PlaywrightTimeoutError("Timeout 1000ms exceeded")
        return True

    assert _waiter(clock, timeout=5, poll_interval=0.5).until(flaky) is True


def test_unexpected_errors_propagate():
    clock = FakeClock()

    def broken(session):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        _waiter(clock, timeout=5, poll_interval=0.5).until(broken)
    assert clock.now == 0


def test_timeout_carries_last_state_and_message():
    clock = FakeClock()

    def missing(session):
        raise ElementNotFoundError("No element matches: #welcome")

    with pytest.raises(WaitTimeoutError) as exc_info:
        _waiter(clock, timeout=1, poll_interval=0.5).until(missing, message="welcome banner")

    error = exc_info.value
    assert "welcome banner" in str(error)
    assert "ElementNotFoundError" in error.last_state


def test_per_call_override():
    clock = FakeClock()
    waiter = _waiter(clock, timeout=30, poll_interval=1)

    with pytest.raises(WaitTimeoutError):
        waiter.until(lambda s: False, timeout=2, poll_interval=0.5)
    assert clock.now == pytest.approx(2)


def test_until_not():
    clock = FakeClock()
    states = iter([True, True, False])

    assert _waiter(clock, timeout=5, poll_interval=1).until_not(lambda s: next(states)) is True
    assert clock.now == 2


def test_until_not_treats_missing_element_as_gone():
    clock = FakeClock()

    def gone(session):
        raise ElementNotFoundError(".spinner")

    assert _waiter(clock, timeout=5, poll_interval=1).until_not(gone) is True
    assert clock.sleeps == []


def test_until_not_times_out():
    clock = FakeClock()
    with pytest.raises(WaitTimeoutError):
        _waiter(clock, timeout=1, poll_interval=0.5).until_not(lambda s: True)


def test_wait_condition_object():
    clock = FakeClock()
    predicate = CountingPredicate(3, result=42)
    condition = WaitCondition("answer", predicate, timeout=5, poll_interval=0.25)

    assert _waiter(clock).wait(condition) == 42
    assert clock.now == pytest.approx(0.5)


@pytest.mark.parametrize("timeout,poll", [(0, 1), (-1, 1), (1, 0), (1, -0.5)])
def test_non_positive_values_rejected(timeout, poll):
    with pytest.raises(ValueError):
        WaitCondition("x", lambda s: True, timeout=timeout, poll_interval=poll)
    with pytest.raises(ValueError):
        Waiter(object(), timeout=timeout, poll_interval=poll)


def test_from_config(config):
    waiter = Waiter.from_config(object(), config)
    assert waiter.timeout == 2
    assert waiter.poll_interval == 0.5


def test_real_clock_smoke():
    waiter = Waiter(object(), timeout=0.2, poll_interval=0.05)
    with pytest.raises(WaitTimeoutError):
        waiter.until(lambda s: False)
