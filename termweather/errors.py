"""Exceptions raised by the lookup and forecast collaborators."""


class TerminalWeatherError(Exception):
    """Base exception for terminal-weather errors."""


class ConfigurationError(TerminalWeatherError):
    """Raised when an environment setting cannot be parsed."""


class LookupFailure(TerminalWeatherError):
    """A remote lookup failed (network, HTTP status, timeout or bad payload).

    The refresh scheduler counts these as failed attempts and retries them.
    """


class GeocodeLookupError(LookupFailure):
    """Raised when the geocoding service cannot be queried or parsed."""

    def __init__(self, query: str, reason: str) -> None:
        self.query = query
        self.reason = reason
        super().__init__(f"Geocoding '{query}' failed: {reason}")


class ForecastError(LookupFailure):
    """Raised when a forecast cannot be fetched for a location."""
