"""Best-effort location detection from the caller's public IP address."""

import logging

from termweather.http_client import retry_session, settings
from termweather.models import Location

logger = logging.getLogger(__name__)


def detect_location(url: str | None = None, timeout: float = 5) -> Location | None:
    """Return the IP-derived Location, or None if it cannot be determined for any reason."""
    try:
        res = retry_session.get(url or settings.geoip_url, timeout=timeout).json()
        name = (res.get("city") or "").strip()
        latitude, longitude = res.get("latitude"), res.get("longitude")
        if not name or latitude is None or longitude is None:
            return None
        return Location(
            name=name,
            latitude=float(latitude),
            longitude=float(longitude),
            country=res.get("country_name"),
            admin1=res.get("region"),
            timezone=res.get("timezone"),
        )
    except Exception as e:
        logger.debug("IP geolocation unavailable: %s", e)
        return None
