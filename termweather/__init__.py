"""Terminal weather: freshness tracking, retry backoff and place-name resolution."""

from termweather.backoff import Backoff
from termweather.freshness import FreshnessState, evaluate_freshness
from termweather.models import (
    GeocodeCandidate,
    GeocodeResolution,
    Location,
    NeedsDisambiguation,
    NotFound,
    RefreshMeta,
    Resolved,
)

__all__ = [
    "Backoff",
    "FreshnessState",
    "GeocodeCandidate",
    "GeocodeResolution",
    "Location",
    "NeedsDisambiguation",
    "NotFound",
    "RefreshMeta",
    "Resolved",
    "evaluate_freshness",
]
