import pandas as pd
import pytest

from termweather.alerts import AlertSeverity, WeatherAlert, scan_alerts
from termweather.models import Location
from termweather.weather import ForecastSnapshot


def snapshot(uv=5.0, hours=24, **overrides):
    """24 calm hours; each override sets the first rows of a column."""
    columns = {
        "temperature_2m": [5.0] * hours,
        "precipitation": [0.0] * hours,
        "weather_code": [3.0] * hours,
        "wind_gusts_10m": [20.0] * hours,
        "visibility": [10000.0] * hours,
    }
    for name, values in overrides.items():
        columns[name][: len(values)] = values
    df = pd.DataFrame(columns)
    return ForecastSnapshot(
        location=Location.from_coords(59.3293, 18.0686),
        fetched_at=pd.Timestamp("2026-02-20", tz="UTC").to_pydatetime(),
        temperature=2.0,
        weather_code=3,
        wind_speed=12.0,
        min_temp=float(df["temperature_2m"].min()),
        max_temp=float(df["temperature_2m"].max()),
        total_precipitation=float(df["precipitation"].sum()),
        hourly=df,
        uv_index_max=uv,
    )


def test_calm_day_has_no_alerts():
    assert scan_alerts(snapshot()) == []


@pytest.mark.parametrize(
    "gust,expected",
    [
        (49.9, None),
        (50.0, WeatherAlert("💨", "Wind gusts up to 50 km/h", AlertSeverity.WARNING)),
        (79.6, WeatherAlert("💨", "Wind gusts up to 80 km/h", AlertSeverity.WARNING)),
        (80.0, WeatherAlert("⚡", "Wind gusts up to 80 km/h", AlertSeverity.DANGER)),
    ],
)
def test_wind_gusts(gust, expected):
    alerts = scan_alerts(snapshot(wind_gusts_10m=[gust]))
    assert alerts == ([expected] if expected else [])


@pytest.mark.parametrize(
    "uv,expected",
    [
        (None, None),
        (5.9, None),
        (6.0, WeatherAlert("☀", "UV index high (6)", AlertSeverity.WARNING)),
        (8.0, WeatherAlert("☀", "UV index very high (8)", AlertSeverity.DANGER)),
    ],
)
def test_uv_index(uv, expected):
    alerts = scan_alerts(snapshot(uv=uv))
    assert alerts == ([expected] if expected else [])


@pytest.mark.parametrize("code", [56, 57, 66, 67])
def test_freezing_rain(code):
    assert scan_alerts(snapshot(weather_code=[float(code)])) == [
        WeatherAlert("❄", "Freezing rain/drizzle expected", AlertSeverity.DANGER)
    ]


@pytest.mark.parametrize("code", [95, 96, 99])
def test_thunder(code):
    assert scan_alerts(snapshot(weather_code=[float(code)])) == [
        WeatherAlert("⚡", "Thunderstorms expected", AlertSeverity.WARNING)
    ]


def test_heavy_precipitation_threshold():
    assert scan_alerts(snapshot(precipitation=[12.0, 12.9])) == []
    assert scan_alerts(snapshot(precipitation=[12.5, 12.5, -3.0])) == [
        WeatherAlert("🌧", "Heavy precipitation: 25.0mm in 24h", AlertSeverity.WARNING)
    ]


def test_low_visibility_threshold():
    assert scan_alerts(snapshot(visibility=[1000.0])) == []
    assert scan_alerts(snapshot(visibility=[800.0])) == [
        WeatherAlert("░", "Low visibility: 0.8km", AlertSeverity.WARNING)
    ]


def test_extreme_heat_threshold():
    assert scan_alerts(snapshot(temperature_2m=[37.9])) == []
    assert scan_alerts(snapshot(temperature_2m=[40.0])) == [
        WeatherAlert("🔥", "Extreme heat: up to 40°C", AlertSeverity.DANGER)
    ]


def test_extreme_cold_threshold():
    assert scan_alerts(snapshot(temperature_2m=[-14.9])) == []
    assert scan_alerts(snapshot(temperature_2m=[-15.0])) == [
        WeatherAlert("❄", "Extreme cold: down to -15°C", AlertSeverity.DANGER)
    ]
    assert scan_alerts(snapshot(temperature_2m=[-20.0]))[0].message == "Extreme cold: down to -20°C"


def test_only_next_24_hours_count():
    late_storm = snapshot(hours=30)
    late_storm.hourly.loc[25, "weather_code"] = 95.0
    assert scan_alerts(late_storm) == []


def test_missing_columns_are_skipped():
    s = snapshot(uv=None)
    s.hourly = pd.DataFrame({"temperature_2m": [5.0, 6.0]})
    assert scan_alerts(s) == []


def test_danger_sorted_before_warning():
    alerts = scan_alerts(snapshot(uv=9.0, weather_code=[95.0], wind_gusts_10m=[90.0]))
    assert [a.severity for a in alerts] == [AlertSeverity.DANGER, AlertSeverity.DANGER, AlertSeverity.WARNING]
    assert [a.message for a in alerts] == [
        "Wind gusts up to 90 km/h",
        "UV index very high (9)",
        "Thunderstorms expected",
    ]
    assert AlertSeverity.INFO < AlertSeverity.WARNING < AlertSeverity.DANGER
