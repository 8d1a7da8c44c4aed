import os
import tempfile
from datetime import datetime, timezone

import pytest
import requests

# Keep the HTTP cache out of the working tree; set before termweather.http_client is imported.
os.environ.setdefault("TERMINAL_WEATHER_CACHE_PATH", os.path.join(tempfile.mkdtemp(), "cache"))

from termweather.models import GeocodeCandidate

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, payload=None, status=200, invalid_json=False):
        self.payload = payload
        self.status_code = status
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """Stands in for the cached retry session; returns queued responses or raises."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def now():
    return NOW


def candidate(name, population=None, country_code="US", admin1=None, **kwargs):
    return GeocodeCandidate(
        name=name,
        latitude=kwargs.pop("latitude", 0.0),
        longitude=kwargs.pop("longitude", 0.0),
        country=kwargs.pop("country", "United States"),
        country_code=country_code,
        admin1=admin1,
        population=population,
        **kwargs,
    )
