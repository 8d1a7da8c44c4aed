"""Fetch Open-Meteo forecasts and summarise the next 24 hours."""

import logging
from dataclasses import dataclass
from datetime import datetime

import pandas as pd

from termweather.errors import ForecastError
from termweather.freshness import utcnow
from termweather.http_client import openmeteo, settings
from termweather.models import Location

logger = logging.getLogger(__name__)

CURRENT_VARS = ["temperature_2m", "weather_code", "wind_speed_10m"]
HOURLY_VARS = ["temperature_2m", "precipitation", "weather_code", "wind_gusts_10m", "visibility"]
DAILY_VARS = ["uv_index_max"]


@dataclass
class ForecastSnapshot:
    location: Location
    fetched_at: datetime
    temperature: float
    weather_code: int
    wind_speed: float
    min_temp: float
    max_temp: float
    total_precipitation: float
    hourly: pd.DataFrame
    uv_index_max: float | None = None


def summarize_hourly(df: pd.DataFrame) -> dict:
    """Min/max temperature and total precipitation over an hourly frame."""
    if df.empty:
        raise ForecastError("Forecast contained no hourly data")
    return {
        "min_temp": float(df["temperature_2m"].min()),
        "max_temp": float(df["temperature_2m"].max()),
        "total_precipitation": float(df["precipitation"].sum()) if "precipitation" in df else 0.0,
    }


def _hourly_frame(hourly) -> pd.DataFrame:
    hourly_data = {
        "date": pd.date_range(
            start=pd.to_datetime(hourly.Time(), unit="s", utc=True),
            end=pd.to_datetime(hourly.TimeEnd(), unit="s", utc=True),
            freq=pd.Timedelta(seconds=hourly.Interval()),
            inclusive="left",
        )
    }
    for i, name in enumerate(HOURLY_VARS[: hourly.VariablesLength()]):
        hourly_data[name] = hourly.Variables(i).ValuesAsNumpy()
    return pd.DataFrame(hourly_data)


def _first_daily_value(daily) -> float | None:
    if daily is None or daily.VariablesLength() == 0:
        return None
    values = daily.Variables(0).ValuesAsNumpy()
    if len(values) == 0 or pd.isna(values[0]):
        return None
    return float(values[0])


def fetch_forecast(location: Location, *, url: str | None = None) -> ForecastSnapshot:
    """
    Fetch current conditions, a 24h hourly forecast and today's UV maximum for
    `location`. Raises ForecastError on any failure, so the caller can count and retry it.
    """
    params = {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "current": CURRENT_VARS,
        "hourly": HOURLY_VARS,
        "daily": DAILY_VARS,
        "forecast_days": 1,
        "timezone": "auto",
    }
    try:
        response = openmeteo.weather_api(url or settings.forecast_url, params=params)[0]
        current = response.Current()
        df = _hourly_frame(response.Hourly())
        temperature = float(current.Variables(0).Value())
        weather_code = int(current.Variables(1).Value())
        wind_speed = float(current.Variables(2).Value())
        uv_index_max = _first_daily_value(response.Daily())
    except Exception as e:
        raise ForecastError(f"Forecast for {location.display_name()} unavailable: {e}") from e

    summary = summarize_hourly(df)
    logger.debug("Fetched %d hourly rows for %s", len(df), location.name)
    return ForecastSnapshot(
        location=location,
        fetched_at=utcnow(),
        temperature=temperature,
        weather_code=weather_code,
        wind_speed=wind_speed,
        hourly=df,
        uv_index_max=uv_index_max,
        **summary,
    )
