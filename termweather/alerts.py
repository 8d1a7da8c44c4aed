"""Scan a forecast snapshot for conditions worth warning about."""

import math
from dataclasses import dataclass
from enum import IntEnum

import pandas as pd

from termweather.weather import ForecastSnapshot

FREEZING_CODES = (56, 57, 66, 67)
THUNDER_CODES = (95, 96, 99)


class AlertSeverity(IntEnum):
    INFO = 0
    WARNING = 1
    DANGER = 2


@dataclass(frozen=True)
class WeatherAlert:
    icon: str
    message: str
    severity: AlertSeverity


def _round(value: float) -> int:
    """Round half away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _column(df: pd.DataFrame, name: str) -> pd.Series:
    if name not in df:
        return pd.Series(dtype=float)
    return df[name].dropna()


def _wind_gust_alert(df):
    gusts = _column(df, "wind_gusts_10m")
    if gusts.empty:
        return None
    max_gust = float(gusts.max())
    if max_gust >= 80.0:
        return WeatherAlert("⚡", f"Wind gusts up to {_round(max_gust)} km/h", AlertSeverity.DANGER)
    if max_gust >= 50.0:
        return WeatherAlert("💨", f"Wind gusts up to {_round(max_gust)} km/h", AlertSeverity.WARNING)
    return None


def _uv_alert(uv: float | None):
    if uv is None:
        return None
    if uv >= 8.0:
        return WeatherAlert("☀", f"UV index very high ({_round(uv)})", AlertSeverity.DANGER)
    if uv >= 6.0:
        return WeatherAlert("☀", f"UV index high ({_round(uv)})", AlertSeverity.WARNING)
    return None


def _has_code(df, codes) -> bool:
    return bool(_column(df, "weather_code").astype(int).isin(codes).any())


def _freezing_alert(df):
    if _has_code(df, FREEZING_CODES):
        return WeatherAlert("❄", "Freezing rain/drizzle expected", AlertSeverity.DANGER)
    return None


def _heavy_precip_alert(df):
    total = float(_column(df, "precipitation").clip(lower=0.0).sum())
    if total >= 25.0:
        return WeatherAlert("🌧", f"Heavy precipitation: {total:.1f}mm in 24h", AlertSeverity.WARNING)
    return None


def _low_visibility_alert(df):
    visibility = _column(df, "visibility")
    if visibility.empty:
        return None
    min_vis = float(visibility.min())
    if min_vis < 1000.0:
        return WeatherAlert("░", f"Low visibility: {min_vis / 1000:.1f}km", AlertSeverity.WARNING)
    return None


def _extreme_heat_alert(df):
    temps = _column(df, "temperature_2m")
    if temps.empty or float(temps.max()) < 38.0:
        return None
    return WeatherAlert("🔥", f"Extreme heat: up to {_round(float(temps.max()))}°C", AlertSeverity.DANGER)


def _extreme_cold_alert(df):
    temps = _column(df, "temperature_2m")
    if temps.empty or float(temps.min()) > -15.0:
        return None
    return WeatherAlert("❄", f"Extreme cold: down to {_round(float(temps.min()))}°C", AlertSeverity.DANGER)


def _thunder_alert(df):
    if _has_code(df, THUNDER_CODES):
        return WeatherAlert("⚡", "Thunderstorms expected", AlertSeverity.WARNING)
    return None


def scan_alerts(snapshot: ForecastSnapshot) -> list[WeatherAlert]:
    """
    Alerts for the next 24 hours of `snapshot`, most severe first. Alerts of
    equal severity keep the order they are checked in.
    """
    next_24h = snapshot.hourly.head(24)
    candidates = [
        _wind_gust_alert(next_24h),
        _uv_alert(snapshot.uv_index_max),
        _freezing_alert(next_24h),
        _heavy_precip_alert(next_24h),
        _low_visibility_alert(next_24h),
        _extreme_heat_alert(next_24h),
        _extreme_cold_alert(next_24h),
        _thunder_alert(next_24h),
    ]
    alerts = [a for a in candidates if a is not None]
    return sorted(alerts, key=lambda a: a.severity, reverse=True)
