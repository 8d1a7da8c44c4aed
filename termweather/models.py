"""Locations, geocoding candidates/outcomes and refresh bookkeeping."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from termweather.freshness import FreshnessState, evaluate_freshness, utcnow


@dataclass(frozen=True)
class Location:
    """A place the forecast client can fetch weather for."""

    name: str
    latitude: float
    longitude: float
    country: str | None = None
    admin1: str | None = None
    timezone: str | None = None
    population: int | None = None

    @classmethod
    def from_coords(cls, latitude: float, longitude: float) -> "Location":
        return cls(name=f"{latitude:.4f}, {longitude:.4f}", latitude=latitude, longitude=longitude)

    def display_name(self) -> str:
        if self.admin1 and self.country:
            return f"{self.name}, {self.admin1}, {self.country}"
        if self.country:
            return f"{self.name}, {self.country}"
        return self.name


@dataclass(frozen=True)
class GeocodeCandidate:
    """One unresolved place returned by a name lookup."""

    name: str
    latitude: float
    longitude: float
    country: str | None = None
    country_code: str | None = None
    admin1: str | None = None
    timezone: str | None = None
    population: int | None = None

    @classmethod
    def from_api(cls, record: dict) -> "GeocodeCandidate":
        """
        Build a candidate from one Open-Meteo geocoding result.
        Raises KeyError/TypeError/ValueError when name or coordinates are missing or invalid.
        """
        population = record.get("population")
        return cls(
            name=str(record["name"]),
            latitude=float(record["latitude"]),
            longitude=float(record["longitude"]),
            country=record.get("country"),
            country_code=record.get("country_code"),
            admin1=record.get("admin1"),
            timezone=record.get("timezone"),
            population=int(population) if population is not None else None,
        )

    def to_location(self) -> Location:
        return Location(
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            country=self.country,
            admin1=self.admin1,
            timezone=self.timezone,
            population=self.population,
        )

    def label(self) -> str:
        return self.to_location().display_name()


@dataclass(frozen=True)
class Resolved:
    location: Location


@dataclass(frozen=True)
class NeedsDisambiguation:
    """Several places share the queried name; the user picks slot 1..len(candidates)."""

    candidates: tuple[GeocodeCandidate, ...]


@dataclass(frozen=True)
class NotFound:
    query: str


GeocodeResolution = Resolved | NeedsDisambiguation | NotFound


@dataclass
class RefreshMeta:
    """
    Fetch history for one data source. `state` is cached but always recomputed
    from last_success and consecutive_failures whenever either changes.
    """

    last_success: datetime | None = None
    consecutive_failures: int = 0
    last_attempt: datetime | None = None
    next_retry_at: datetime | None = None
    state: FreshnessState = field(init=False)

    def __post_init__(self):
        self.state = evaluate_freshness(self.last_success, self.consecutive_failures)

    def refresh(self, now: datetime | None = None) -> FreshnessState:
        self.state = evaluate_freshness(self.last_success, self.consecutive_failures, now)
        return self.state

    def mark_success(self, now: datetime | None = None) -> None:
        now = now or utcnow()
        self.last_attempt = now
        self.last_success = now
        self.next_retry_at = None
        self.consecutive_failures = 0
        self.refresh(now)

    def mark_failure(self, now: datetime | None = None) -> None:
        now = now or utcnow()
        self.last_attempt = now
        self.next_retry_at = None
        self.consecutive_failures += 1
        self.refresh(now)

    def schedule_retry_in(self, delay_secs: float, now: datetime | None = None) -> None:
        self.next_retry_at = (now or utcnow()) + timedelta(seconds=delay_secs)

    def clear_retry(self) -> None:
        self.next_retry_at = None

    def age_minutes(self, now: datetime | None = None) -> int | None:
        if self.last_success is None:
            return None
        return int(((now or utcnow()) - self.last_success).total_seconds() // 60)

    def retry_in_seconds(self, now: datetime | None = None) -> int | None:
        if self.next_retry_at is None:
            return None
        return max(0, int((self.next_retry_at - (now or utcnow())).total_seconds()))
