"""Shared HTTP client: cached session and Open-Meteo client with retries."""

import openmeteo_requests
import requests_cache
from retry_requests import retry

from termweather.config import Settings, load_settings


def build_sessions(settings: Settings):
    """Return (retry_session, openmeteo_client) wired from settings."""
    cache_session = requests_cache.CachedSession(settings.cache_path, expire_after=settings.cache_expire_after)
    cache_session.headers["User-Agent"] = settings.user_agent
    session = retry(cache_session, retries=settings.http_retries, backoff_factor=settings.http_backoff_factor)
    return session, openmeteo_requests.Client(session=session)


settings = load_settings()
retry_session, openmeteo = build_sessions(settings)
