"""Drive fetch attempts for one data source and keep its freshness current."""

import logging
import random
import time
from datetime import datetime

import requests

from termweather.backoff import Backoff
from termweather.errors import TerminalWeatherError
from termweather.freshness import FreshnessState, utcnow
from termweather.models import RefreshMeta

logger = logging.getLogger(__name__)

REFRESH_JITTER = 0.1
MIN_WAIT_SECS = 1.0


class RefreshScheduler:
    """
    Owns one Backoff and one RefreshMeta. Attempts run one at a time; the
    bookkeeping only changes once an attempt has completed.

    Args:
        backoff: Retry delay generator (seconds).
        meta: Fetch history to update; a fresh RefreshMeta if omitted.
        refresh_interval: Seconds between routine refreshes when nothing failed.
        clock: Returns the current aware datetime.
        sleep: Blocks for a number of seconds.
    """

    def __init__(
        self,
        backoff: Backoff,
        meta: RefreshMeta | None = None,
        *,
        refresh_interval: float = 600,
        clock=utcnow,
        sleep=time.sleep,
        rng: random.Random | None = None,
    ):
        self.backoff = backoff
        self.meta = meta if meta is not None else RefreshMeta()
        self.refresh_interval = refresh_interval
        self.clock = clock
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.last_error: str | None = None

    @property
    def state(self) -> FreshnessState:
        return self.meta.state

    def refresh_state(self, now: datetime | None = None) -> FreshnessState:
        """Recompute freshness from elapsed time alone (called on a timer)."""
        return self.meta.refresh(now or self.clock())

    def record_success(self, now: datetime | None = None) -> None:
        self.meta.mark_success(now or self.clock())
        self.backoff.reset()
        self.last_error = None

    def record_failure(self, error: str = "", now: datetime | None = None) -> float:
        """Count a failed attempt and return the delay before the retry."""
        now = now or self.clock()
        self.meta.mark_failure(now)
        delay = self.backoff.next_delay()
        self.meta.schedule_retry_in(delay, now)
        self.last_error = error or None
        logger.warning(
            "Fetch failed (%d in a row, %s); retrying in %ss: %s",
            self.meta.consecutive_failures,
            self.meta.state.value,
            delay,
            error,
        )
        return delay

    def attempt(self, fetch):
        """
        Run one fetch. Returns its result, or None if it failed; a failure is
        recorded and scheduled for retry.
        """
        try:
            result = fetch()
        except (TerminalWeatherError, requests.RequestException) as e:
            self.record_failure(str(e))
            return None
        self.record_success()
        return result

    def next_wait(self, now: datetime | None = None) -> float:
        """Seconds until the next attempt: a pending retry, else the jittered refresh interval."""
        retry_in = self.meta.retry_in_seconds(now or self.clock())
        if retry_in is not None:
            return max(MIN_WAIT_SECS, float(retry_in))
        jitter = self.rng.uniform(-REFRESH_JITTER, REFRESH_JITTER)
        return max(MIN_WAIT_SECS, self.refresh_interval * (1.0 + jitter))

    def run(self, fetch, max_attempts: int | None = None, on_result=None) -> None:
        """
        Attempt, wait, repeat. Stops after max_attempts (forever if None).
        on_result is called with each attempt's result (None on failure).
        """
        attempts = 0
        while max_attempts is None or attempts < max_attempts:
            result = self.attempt(fetch)
            attempts += 1
            if on_result is not None:
                on_result(result)
            if max_attempts is not None and attempts >= max_attempts:
                break
            self.sleep(self.next_wait())
            self.refresh_state()
