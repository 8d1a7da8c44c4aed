"""WeatherDashboard: pick a location, keep its forecast refreshed, report freshness."""

import logging
from datetime import datetime
from functools import partial

from termweather import geoip, weather
from termweather.alerts import scan_alerts
from termweather.backoff import Backoff
from termweather.config import Settings, load_settings
from termweather.errors import GeocodeLookupError
from termweather.geocode import GeocodeResolver, reverse_geocode, search_candidates, select_candidate
from termweather.models import (
    GeocodeCandidate,
    GeocodeResolution,
    Location,
    NeedsDisambiguation,
    NotFound,
    Resolved,
)
from termweather.scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class WeatherDashboard:
    """Weather for one place. Use either lat/lon, a city name, or neither (IP lookup)."""

    def __init__(
        self,
        *,
        city_name=None,
        latitude=None,
        longitude=None,
        country_code=None,
        settings: Settings | None = None,
        resolver: GeocodeResolver | None = None,
        fetch_forecast=None,
        scheduler: RefreshScheduler | None = None,
    ):
        """
        Args:
            city_name: Optional. Place name to geocode (e.g. "Springfield").
            latitude: Optional. Latitude in degrees; use with longitude.
            longitude: Optional. Longitude in degrees; use with latitude.
            country_code: Optional ISO 3166-1 alpha-2 filter for city lookups.

        With neither coordinates nor a city, the location comes from IP geolocation,
        falling back to the configured default city.
        """
        if (latitude is None) != (longitude is None):
            raise ValueError("Provide both latitude and longitude, or neither.")
        self.settings = settings or load_settings()
        self.city_name = city_name
        self.latitude = latitude
        self.longitude = longitude
        self.country_code = country_code or self.settings.country_code
        s = self.settings
        self.resolver = resolver or GeocodeResolver(
            partial(search_candidates, url=s.geocode_url, count=s.geocode_count, timeout=s.http_timeout)
        )
        self._fetch_forecast = fetch_forecast or partial(weather.fetch_forecast, url=s.forecast_url)
        self.scheduler = scheduler or RefreshScheduler(
            Backoff(self.settings.backoff_base, self.settings.backoff_max),
            refresh_interval=self.settings.refresh_interval,
        )

        self.location: Location | None = None
        self.pending_candidates: tuple[GeocodeCandidate, ...] = ()
        self.forecast: weather.ForecastSnapshot | None = None
        self.last_error: str | None = None

    @property
    def selecting_location(self) -> bool:
        return bool(self.pending_candidates)

    def locate(self) -> Location | None:
        """Choose the location to show. None while a choice is pending or nothing matched."""
        if self.location is not None:
            return self.location
        if self.pending_candidates:
            return None
        if self.latitude is not None:
            return self._use(self._named_coords(float(self.latitude), float(self.longitude)))
        if self.city_name:
            return self._lookup_city(self.city_name)

        detected = geoip.detect_location(self.settings.geoip_url)
        if detected is not None:
            return self._use(detected)
        logger.info("IP geolocation unavailable; using %s", self.settings.default_city)
        return self._lookup_city(self.settings.default_city)

    def _named_coords(self, lat: float, lon: float) -> Location:
        try:
            named = reverse_geocode(lat, lon, self.settings.reverse_geocode_url, self.settings.http_timeout)
        except GeocodeLookupError as e:
            logger.info("Reverse geocoding failed: %s", e)
            named = None
        return named or Location.from_coords(lat, lon)

    def _lookup_city(self, query: str) -> Location | None:
        try:
            resolution = self.resolver.resolve(query, self.country_code)
        except GeocodeLookupError as e:
            self.last_error = str(e)
            self.scheduler.record_failure(str(e))
            return None
        return self.apply_resolution(resolution)

    def apply_resolution(self, resolution: GeocodeResolution) -> Location | None:
        if isinstance(resolution, Resolved):
            return self._use(resolution.location)
        if isinstance(resolution, NeedsDisambiguation):
            self.pending_candidates = resolution.candidates
            return None
        if isinstance(resolution, NotFound):
            self.last_error = f"No geocoding result for {resolution.query}"
            return None
        raise TypeError(f"Unknown geocode resolution: {resolution!r}")

    def choose(self, slot: int) -> Location:
        """Pick entry `slot` (1-based) of the pending disambiguation list."""
        if not self.pending_candidates:
            raise ValueError("No location choice is pending.")
        return self._use(select_candidate(NeedsDisambiguation(self.pending_candidates), slot))

    def _use(self, location: Location) -> Location:
        self.location = location
        self.pending_candidates = ()
        self.last_error = None
        return location

    def refresh(self):
        """One fetch attempt for the current location. Returns the snapshot or None."""
        location = self.locate()
        if location is None:
            return None
        snapshot = self.scheduler.attempt(lambda: self._fetch_forecast(location))
        if snapshot is not None:
            self.forecast = snapshot
            self.last_error = None
        else:
            self.last_error = self.scheduler.last_error
        return snapshot

    def freshness_badge(self, now: datetime | None = None) -> str | None:
        """'⚠ stale' / '⚠ offline' (with retry countdown when one is scheduled), None when fresh."""
        now = now or self.scheduler.clock()
        state = self.scheduler.refresh_state(now)
        if state.badge is None:
            return None
        retry_in = self.scheduler.meta.retry_in_seconds(now)
        if not retry_in:
            return state.badge
        return f"{state.badge} · retry in {retry_in}s"

    def status_line(self, now: datetime | None = None) -> str:
        if self.pending_candidates:
            return f"Choose a location (1-{len(self.pending_candidates)})"
        if self.forecast is None:
            return self.last_error or "Fetching weather..."
        f = self.forecast
        line = (
            f"{f.location.display_name()}: {f.temperature:.1f}°C "
            f"(min {f.min_temp:.1f}, max {f.max_temp:.1f}, rain {f.total_precipitation:.1f} mm)"
        )
        alerts = scan_alerts(f)
        if alerts:
            line = f"{line} {alerts[0].icon} {alerts[0].message}"
        badge = self.freshness_badge(now)
        return f"{line} {badge}" if badge else line

    def print_display(self):
        """Print a plain-text summary (or the numbered location choices)."""
        print("\n" + "=" * 45)
        if self.pending_candidates:
            print("Several places match:")
            for i, candidate in enumerate(self.pending_candidates, 1):
                print(f"  {i}. {candidate.label()}")
        print(self.status_line())
        age = self.scheduler.meta.age_minutes(self.scheduler.clock())
        if age is not None:
            print(f"Updated {age} min ago")
        print("=" * 45 + "\n")
