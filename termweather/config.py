"""Runtime settings read from the environment (and a .env file, if present)."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from termweather.errors import ConfigurationError

ENV_PREFIX = "TERMINAL_WEATHER_"


@dataclass(frozen=True)
class Settings:
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    geocode_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    reverse_geocode_url: str = "https://nominatim.openstreetmap.org/reverse"
    geoip_url: str = "https://ipapi.co/json/"
    user_agent: str = "terminal-weather/0.1"
    # HTTP session: 1-hour cache, retries with backoff
    cache_path: str = ".cache"
    cache_expire_after: int = 3600
    http_retries: int = 5
    http_backoff_factor: float = 0.2
    http_timeout: float = 10.0
    # Refresh scheduling, in seconds
    backoff_base: float = 10
    backoff_max: float = 300
    refresh_interval: float = 600
    default_city: str = "Stockholm"
    country_code: str | None = None
    geocode_count: int = 10
    log_level: str = "WARNING"


def _env(name: str) -> str | None:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _number(name: str, default, cast):
    raw = _env(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{ENV_PREFIX}{name}={raw!r} is not a valid {cast.__name__}") from e


def load_settings(dotenv_path: str | None = None) -> Settings:
    """
    Build Settings from TERMINAL_WEATHER_* environment variables.

    Args:
        dotenv_path: Optional .env file loaded first (existing variables win).
    """
    load_dotenv(dotenv_path)
    defaults = Settings()
    settings = Settings(
        forecast_url=_env("FORECAST_URL") or defaults.forecast_url,
        geocode_url=_env("GEOCODE_URL") or defaults.geocode_url,
        reverse_geocode_url=_env("REVERSE_GEOCODE_URL") or defaults.reverse_geocode_url,
        geoip_url=_env("GEOIP_URL") or defaults.geoip_url,
        user_agent=_env("USER_AGENT") or defaults.user_agent,
        cache_path=_env("CACHE_PATH") or defaults.cache_path,
        cache_expire_after=_number("CACHE_EXPIRE_AFTER", defaults.cache_expire_after, int),
        http_retries=_number("HTTP_RETRIES", defaults.http_retries, int),
        http_backoff_factor=_number("HTTP_BACKOFF_FACTOR", defaults.http_backoff_factor, float),
        http_timeout=_number("HTTP_TIMEOUT", defaults.http_timeout, float),
        backoff_base=_number("BACKOFF_BASE", defaults.backoff_base, float),
        backoff_max=_number("BACKOFF_MAX", defaults.backoff_max, float),
        refresh_interval=_number("REFRESH_INTERVAL", defaults.refresh_interval, float),
        default_city=_env("DEFAULT_CITY") or defaults.default_city,
        country_code=_env("COUNTRY_CODE"),
        geocode_count=_number("GEOCODE_COUNT", defaults.geocode_count, int),
        log_level=(_env("LOG_LEVEL") or defaults.log_level).upper(),
    )
    if settings.backoff_max < settings.backoff_base:
        raise ConfigurationError(
            f"{ENV_PREFIX}BACKOFF_MAX ({settings.backoff_max}) is smaller than BACKOFF_BASE ({settings.backoff_base})"
        )
    return settings


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
