"""Capped exponential retry delays."""


class Backoff:
    """Doubling delay generator: base, 2*base, 4*base, ... saturating at max_delay.

    One instance belongs to one refresh scheduler and is never shared between
    concurrent attempts.
    """

    def __init__(self, base: float, max_delay: float):
        if base < 0:
            raise ValueError(f"Backoff base must be non-negative, got {base}")
        if max_delay < base:
            raise ValueError(f"Backoff max_delay ({max_delay}) is smaller than base ({base})")
        self._base = base
        self._max = max_delay
        self._current = base

    @property
    def base(self) -> float:
        return self._base

    @property
    def max_delay(self) -> float:
        return self._max

    @property
    def current(self) -> float:
        return self._current

    def next_delay(self) -> float:
        """Return the current delay, then double it up to the cap."""
        delay = self._current
        self._current = min(self._current * 2, self._max)
        return delay

    def reset(self) -> None:
        self._current = self._base

    def __repr__(self) -> str:
        return f"Backoff(current={self._current}, base={self._base}, max_delay={self._max})"
