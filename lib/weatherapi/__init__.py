"""
Weather API Client Library

This module provides a synchronous client for a weatherapi.com style service:
current weather and multi-day forecast lookups by free-text location.

Example usage:
    from internal.config.manager import ConfigManager
    from lib.weatherapi import WeatherApiClient, getPath

    config = ConfigManager("config.toml").getWeatherApiConfig()
    with WeatherApiClient(config) as client:
        response = client.getWeatherForecast("Berlin", 5)
        days = getPath(response.json(), "forecast.forecastday")
        print(f"Got {len(days)} forecast days")
"""

from .client import WeatherApiClient
from .models import CurrentWeather, ForecastDay, Location, WeatherCondition, getList, getPath

__all__ = [
    "Location",
    "WeatherCondition",
    "CurrentWeather",
    "ForecastDay",
    "WeatherApiClient",
    "getList",
    "getPath",
]
