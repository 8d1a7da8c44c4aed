"""Demo: show the weather for a city, coordinates or the IP-detected location. Loads .env from project root."""

import os

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env"))

from termweather.config import configure_logging, load_settings
from termweather.dashboard import WeatherDashboard

if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)

    CITY = os.environ.get("TERMINAL_WEATHER_CITY")
    LAT = os.environ.get("TERMINAL_WEATHER_LAT")
    LON = os.environ.get("TERMINAL_WEATHER_LON")

    # Option 1: by coordinates; Option 2: by city name; otherwise IP lookup
    if LAT and LON:
        app = WeatherDashboard(latitude=float(LAT), longitude=float(LON), settings=settings)
    else:
        app = WeatherDashboard(city_name=CITY, settings=settings)

    app.refresh()
    if app.selecting_location:
        app.print_display()
        choice = input(f"Select location 1-{len(app.pending_candidates)}: ")
        app.choose(int(choice))
        app.refresh()
    app.print_display()
