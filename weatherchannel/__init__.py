"""Current weather condition for the device's approximate location."""
from .api import WeatherChannelApi, build_weather_api
from .conditions import map_condition
from .entities import (
    Coordinate,
    DayNight,
    LocationFix,
    QueryStatus,
    RawWeatherFields,
    WeatherResult,
    WeatherStatus,
)

__version__ = "1.0.0"

__all__ = [
    "Coordinate",
    "DayNight",
    "LocationFix",
    "QueryStatus",
    "RawWeatherFields",
    "WeatherChannelApi",
    "WeatherResult",
    "WeatherStatus",
    "build_weather_api",
    "map_condition",
]
