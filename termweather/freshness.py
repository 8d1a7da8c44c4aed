"""Classify how far displayed weather data can be trusted."""

from datetime import datetime, timedelta, timezone
from enum import Enum

STALE_AFTER = timedelta(minutes=10)
OFFLINE_AFTER = timedelta(minutes=30)
STALE_FAILURES = 1
OFFLINE_FAILURES = 3


class FreshnessState(Enum):
    FRESH = "fresh"
    STALE = "stale"
    OFFLINE = "offline"

    @property
    def severity(self) -> int:
        """Ordering for UI styling only: fresh < stale < offline."""
        return _SEVERITY[self]

    @property
    def badge(self) -> str | None:
        """Short warning label shown next to the data, or None when fresh."""
        return _BADGES[self]


_SEVERITY = {FreshnessState.FRESH: 0, FreshnessState.STALE: 1, FreshnessState.OFFLINE: 2}
_BADGES = {FreshnessState.FRESH: None, FreshnessState.STALE: "⚠ stale", FreshnessState.OFFLINE: "⚠ offline"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def evaluate_freshness(
    last_success: datetime | None,
    consecutive_failures: int,
    now: datetime | None = None,
) -> FreshnessState:
    """
    Map the last successful fetch time and the current failure streak to a
    FreshnessState. Whichever signal is worse wins.

    Args:
        last_success: When a fetch last succeeded, or None if none ever has.
        consecutive_failures: Failed attempts since that success (>= 0).
        now: Reference instant; defaults to the current UTC time.
    """
    if consecutive_failures < 0:
        raise ValueError(f"consecutive_failures must be >= 0, got {consecutive_failures}")
    if last_success is None:
        return FreshnessState.OFFLINE

    age = (now or utcnow()) - last_success
    if age >= OFFLINE_AFTER or consecutive_failures >= OFFLINE_FAILURES:
        return FreshnessState.OFFLINE
    if age >= STALE_AFTER or consecutive_failures >= STALE_FAILURES:
        return FreshnessState.STALE
    return FreshnessState.FRESH
