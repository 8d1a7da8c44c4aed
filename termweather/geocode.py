"""Resolve place names to locations via the Open-Meteo Geocoding API."""

import logging

import requests

from termweather.errors import GeocodeLookupError
from termweather.http_client import retry_session, settings
from termweather.models import (
    GeocodeCandidate,
    GeocodeResolution,
    Location,
    NeedsDisambiguation,
    NotFound,
    Resolved,
)

logger = logging.getLogger(__name__)

# The location picker offers slots 1-5.
MAX_DISAMBIGUATION_CHOICES = 5


def normalize(value: str) -> str:
    """Case-fold a place name and collapse '-', '_' and runs of whitespace to single spaces."""
    folded = value.strip().casefold().replace("-", " ").replace("_", " ")
    return " ".join(folded.split())


def resolve_candidates(
    candidates: list[GeocodeCandidate],
    query_name: str,
    country_code: str | None = None,
) -> GeocodeResolution:
    """
    Decide between a single match, a disambiguation prompt and NotFound.

    Only candidates whose name equals the query (case-insensitively) count, further
    restricted to `country_code` when given. Several matches are ordered by descending
    population, unknown populations last in their original order, and capped at
    MAX_DISAMBIGUATION_CHOICES.
    """
    wanted = normalize(query_name)
    code = country_code.upper() if country_code else None
    matches = [
        c
        for c in candidates
        if normalize(c.name) == wanted
        and (code is None or (c.country_code or "").upper() == code)
    ]

    if not matches:
        return NotFound(query_name)
    if len(matches) == 1:
        return Resolved(matches[0].to_location())

    ranked = sorted(matches, key=lambda c: (c.population is None, -(c.population or 0)))
    return NeedsDisambiguation(tuple(ranked[:MAX_DISAMBIGUATION_CHOICES]))


def select_candidate(resolution: NeedsDisambiguation, choice: int) -> Location:
    """Turn a 1-based menu slot into the chosen Location."""
    if not 1 <= choice <= len(resolution.candidates):
        raise ValueError(f"Select location 1-{len(resolution.candidates)}, got {choice}")
    return resolution.candidates[choice - 1].to_location()


def search_candidates(
    query: str,
    country_code: str | None = None,
    *,
    url: str | None = None,
    count: int | None = None,
    timeout: float | None = None,
) -> list[GeocodeCandidate]:
    """
    Fetch raw candidates for a place name. Raises GeocodeLookupError on network,
    HTTP or payload errors; an empty list means the lookup worked but found nothing.

    url, count and timeout default to the values loaded from the environment.
    """
    params = {"name": query, "count": count or settings.geocode_count, "language": "en", "format": "json"}
    if country_code:
        params["countryCode"] = country_code
    try:
        response = retry_session.get(
            url or settings.geocode_url, params=params, timeout=timeout or settings.http_timeout
        )
        response.raise_for_status()
        res = response.json()
    except (requests.RequestException, ValueError) as e:
        raise GeocodeLookupError(query, str(e)) from e

    if not isinstance(res, dict):
        raise GeocodeLookupError(query, "unexpected payload")
    if res.get("error"):
        raise GeocodeLookupError(query, res.get("reason", "Geocoding API error"))

    results = res.get("results") or []
    if not isinstance(results, list):
        raise GeocodeLookupError(query, "'results' is not a list")
    try:
        candidates = [GeocodeCandidate.from_api(r) for r in results]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise GeocodeLookupError(query, f"malformed result: {e}") from e
    logger.debug("Geocoding %r returned %d candidate(s)", query, len(candidates))
    return candidates


class GeocodeResolver:
    """Resolve a place-name query using an injected candidate lookup."""

    def __init__(self, lookup=search_candidates):
        self.lookup = lookup

    def resolve(self, query_name: str, country_code: str | None = None) -> GeocodeResolution:
        candidates = self.lookup(query_name, country_code)
        resolution = resolve_candidates(candidates, query_name, country_code)
        logger.info("Resolved %r to %s", query_name, type(resolution).__name__)
        return resolution


def infer_reverse_geocode_url(base_url: str) -> str:
    """Point a '.../search' geocoding URL at the matching '.../reverse' endpoint."""
    if base_url.endswith("/search"):
        return base_url[: -len("/search")] + "/reverse"
    return base_url


def location_from_reverse_address(address: dict, latitude: float, longitude: float) -> Location | None:
    """Name a coordinate pair from a Nominatim address block. None if no usable name."""
    for key in ("city", "town", "village", "municipality", "county", "state"):
        name = (address.get(key) or "").strip()
        if name:
            break
    else:
        return None
    return Location(
        name=name,
        latitude=latitude,
        longitude=longitude,
        country=address.get("country"),
        admin1=address.get("state"),
    )


def reverse_geocode(
    latitude: float, longitude: float, url: str | None = None, timeout: float | None = None
) -> Location | None:
    """
    Look up a place name for coordinates via Nominatim. Returns None when the
    service knows no named place there; raises GeocodeLookupError on failure.
    """
    params = {"lat": latitude, "lon": longitude, "accept-language": "en", "format": "jsonv2"}
    query = f"{latitude}, {longitude}"
    try:
        response = retry_session.get(
            url or settings.reverse_geocode_url, params=params, timeout=timeout or settings.http_timeout
        )
        response.raise_for_status()
        res = response.json()
    except (requests.RequestException, ValueError) as e:
        raise GeocodeLookupError(query, str(e)) from e
    address = res.get("address") if isinstance(res, dict) else None
    if not isinstance(address, dict):
        return None
    return location_from_reverse_address(address, latitude, longitude)
