import random
from datetime import timedelta

import pytest
import requests

from termweather.backoff import Backoff
from termweather.errors import ForecastError
from termweather.freshness import FreshnessState
from termweather.models import RefreshMeta
from termweather.scheduler import RefreshScheduler


class Clock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock(now):
    return Clock(now)


@pytest.fixture
def scheduler(clock):
    return RefreshScheduler(Backoff(10, 300), clock=clock, sleep=lambda s: None, rng=random.Random(7))


def failing():
    raise ForecastError("upstream 502")


def test_starts_offline(scheduler):
    assert scheduler.state is FreshnessState.OFFLINE


def test_success_marks_fresh(scheduler, clock):
    assert scheduler.attempt(lambda: "data") == "data"
    meta = scheduler.meta
    assert meta.last_success == clock.now
    assert meta.consecutive_failures == 0
    assert meta.next_retry_at is None
    assert scheduler.state is FreshnessState.FRESH


def test_failures_degrade_and_back_off(scheduler, clock):
    scheduler.attempt(lambda: "data")
    delays = []
    for expected in (FreshnessState.STALE, FreshnessState.STALE, FreshnessState.OFFLINE):
        assert scheduler.attempt(failing) is None
        assert scheduler.state is expected
        delays.append(scheduler.meta.retry_in_seconds(clock.now))
    assert delays == [10, 20, 40]
    assert scheduler.meta.consecutive_failures == 3
    assert scheduler.last_error == "upstream 502"


def test_success_resets_backoff_and_failures(scheduler):
    for _ in range(4):
        scheduler.attempt(failing)
    scheduler.attempt(lambda: "data")
    assert scheduler.meta.consecutive_failures == 0
    assert scheduler.backoff.current == 10
    assert scheduler.last_error is None
    assert scheduler.record_failure("again") == 10


def test_network_errors_count_as_failures(scheduler):
    def broken():
        raise requests.ConnectionError("no route to host")

    scheduler.attempt(broken)
    assert scheduler.meta.consecutive_failures == 1


def test_unexpected_errors_propagate(scheduler):
    def buggy():
        raise KeyError("temperature")

    with pytest.raises(KeyError):
        scheduler.attempt(buggy)


def test_state_ages_without_attempts(scheduler, clock):
    scheduler.attempt(lambda: "data")
    clock.advance(minutes=10)
    assert scheduler.refresh_state() is FreshnessState.STALE
    clock.advance(minutes=20)
    assert scheduler.refresh_state() is FreshnessState.OFFLINE


def test_next_wait_uses_retry_then_interval(scheduler, clock):
    scheduler.attempt(failing)
    assert scheduler.next_wait() == 10
    clock.advance(seconds=4)
    assert scheduler.next_wait() == 6
    scheduler.attempt(lambda: "data")
    wait = scheduler.next_wait()
    assert 540 <= wait <= 660


def test_next_wait_has_floor(clock):
    s = RefreshScheduler(Backoff(0, 0), clock=clock, refresh_interval=0)
    assert s.next_wait() == 1.0
    s.record_failure("x")
    assert s.next_wait() == 1.0


def test_run_sleeps_between_attempts(clock):
    sleeps = []
    results = []
    outcomes = iter([ForecastError("a"), ForecastError("b"), "ok"])

    def fetch():
        item = next(outcomes)
        if isinstance(item, Exception):
            raise item
        return item

    def sleep(seconds):
        sleeps.append(seconds)
        clock.advance(seconds=seconds)

    s = RefreshScheduler(Backoff(10, 300), clock=clock, sleep=sleep)
    s.run(fetch, max_attempts=3, on_result=results.append)

    assert results == [None, None, "ok"]
    assert sleeps == [10, 20]
    assert s.state is FreshnessState.FRESH


def test_uses_supplied_meta(clock, now):
    meta = RefreshMeta(last_success=now - timedelta(minutes=12))
    s = RefreshScheduler(Backoff(1, 2), meta, clock=clock)
    assert s.meta is meta
    assert s.refresh_state() is FreshnessState.STALE


def test_abandoned_attempt_leaves_meta_untouched(scheduler, clock):
    scheduler.attempt(failing)
    before = (scheduler.meta.last_attempt, scheduler.meta.next_retry_at, scheduler.meta.consecutive_failures)
    clock.advance(seconds=3)

    def cancelled():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        scheduler.attempt(cancelled)

    after = (scheduler.meta.last_attempt, scheduler.meta.next_retry_at, scheduler.meta.consecutive_failures)
    assert after == before
    assert scheduler.meta.retry_in_seconds(clock.now) == 7


def test_completed_attempts_stamp_last_attempt(scheduler, clock):
    scheduler.attempt(lambda: "data")
    assert scheduler.meta.last_attempt == clock.now
    clock.advance(minutes=1)
    scheduler.attempt(failing)
    assert scheduler.meta.last_attempt == clock.now
