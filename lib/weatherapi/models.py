"""
Data models for the Weather API client

This module describes the documented parts of API responses as TypedDicts and
provides dotted-path access into the raw JSON body. Responses are kept
weakly typed on purpose: the conformance tests check for presence and
absence of fields, so nothing is coerced or defaulted here.
"""

from typing import Any, List, Optional, TypedDict

# API Response Models


class Location(TypedDict):
    """Resolved location of a request"""

    name: str  # City name, e.g. "London"
    region: str  # Region or state
    country: str  # Full country name, e.g. "United Kingdom"
    lat: float
    lon: float
    tz_id: str  # e.g. "Europe/London"
    localtime: str  # "yyyy-MM-dd HH:mm"


class WeatherCondition(TypedDict):
    """Weather condition"""

    text: str  # e.g. "Partly cloudy"
    icon: str
    code: int


class CurrentWeather(TypedDict, total=False):
    """Current weather block, present in both current and forecast responses"""

    last_updated: str  # Local time of the observation
    temp_c: float  # Temperature (Celsius)
    condition: WeatherCondition
    wind_kph: float  # Wind speed (km/h)
    humidity: int  # Humidity percentage


class ForecastDay(TypedDict, total=False):
    """One entry of forecast.forecastday"""

    date: str  # "yyyy-MM-dd"
    date_epoch: int
    day: dict  # Aggregates: maxtemp_c, mintemp_c, condition, ...
    astro: dict
    hour: List[dict]


def getPath(data: Any, path: str, default: Optional[Any] = None) -> Any:
    """
    Get value from parsed JSON by dotted path

    Args:
        data: Parsed JSON body (dicts and lists)
        path: Dotted path, e.g. "current.condition.text". Numeric parts index lists.
        default: Returned when any part of the path is missing

    Returns:
        Value at the path, or default
    """
    node = data
    for part in path.split("."):
        if isinstance(node, dict):
            if part not in node:
                return default
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return default
    return node


def getList(data: Any, path: str) -> List[Any]:
    """Get list by dotted path, empty list if the path is missing or not a list"""
    value = getPath(data, path)
    return value if isinstance(value, list) else []
