"""Weather provider client, unit mapping and cached refresh service."""

from .client import (
    clear_weather_dir,
    fetch_weather_data,
    get_snowfall_total,
    location_query,
    parse_snowfall_total,
    write_weather_data,
)
from .service import WeatherResult, WeatherService
from .units import apply_weather

__all__ = [
    "WeatherResult",
    "WeatherService",
    "apply_weather",
    "clear_weather_dir",
    "fetch_weather_data",
    "get_snowfall_total",
    "location_query",
    "parse_snowfall_total",
    "write_weather_data",
]
