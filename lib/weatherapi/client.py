"""
Weather API Client

This module provides the WeatherApiClient class issuing authenticated
requests to the current weather and forecast endpoints.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from internal.config.manager import WeatherApiConfig

logger = logging.getLogger(__name__)


class WeatherApiClient:
    """
    Synchronous client for the weather API

    Every request carries the API key as the ``key`` query parameter. The
    client keeps no state besides its HTTP connection pool: no caching and no
    retries. Non-2xx responses are returned to the caller untouched, transport
    failures (network errors, timeouts) are raised as httpx exceptions.

    Example usage:
        client = WeatherApiClient(config)
        response = client.getCurrentWeather("London")
        assert response.status_code == 200
        print(response.json()["location"]["country"])
        client.close()
    """

    def __init__(self, config: WeatherApiConfig, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize Weather API client

        Args:
            config: Connection settings (API key, base URL, endpoint paths)
            transport: Optional httpx transport replacing the network one
                       (golden data replay or recording, tests)
        """
        self.config = config
        self._client = httpx.Client(
            base_url=config.baseUrl,
            params={"key": config.apiKey},
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def getCurrentWeather(self, location: str) -> httpx.Response:
        """
        Get current weather for a location

        Args:
            location: City name or coordinates, passed as ``q``

        Returns:
            Response with location and current blocks
        """
        return self._get(self.config.currentEndpoint, {"q": location})

    def getWeatherForecast(self, location: str, days: int) -> httpx.Response:
        """
        Get weather forecast for a location

        Args:
            location: City name or coordinates, passed as ``q``
            days: Number of forecast days, bounded by the API (1-10 on paid plans)

        Returns:
            Response with location, current and forecast.forecastday blocks
        """
        return self._get(self.config.forecastEndpoint, {"q": location, "days": days})

    def _get(self, endpoint: str, params: Dict[str, Any]) -> httpx.Response:
        logger.debug(f"GET {endpoint} with params: {params}")
        response = self._client.get(endpoint, params=params)
        logger.debug(
            f"GET {endpoint} finished: {response.status_code} in {response.elapsed.total_seconds() * 1000:.0f}ms"
        )
        return response

    def close(self) -> None:
        """Close underlying HTTP connections"""
        self._client.close()

    def __enter__(self) -> "WeatherApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
