"""
Test suite for the Weather API client

Unit tests for request building, response passthrough and error
propagation, using httpx.MockTransport instead of the network.
"""

from typing import List

import httpx
import pytest

from internal.config.manager import WeatherApiConfig
from lib.weatherapi import WeatherApiClient, getList, getPath


@pytest.fixture
def apiConfig() -> WeatherApiConfig:
    """Connection settings pointing at a fake host"""
    return WeatherApiConfig(
        apiKey="test_key",
        baseUrl="https://api.example.test/v1",
        currentEndpoint="/current.json",
        forecastEndpoint="/forecast.json",
    )


@pytest.fixture
def sampleCurrentResponse():
    """Sample current weather API response"""
    return {
        "location": {"name": "London", "region": "City of London, Greater London", "country": "United Kingdom"},
        "current": {
            "last_updated": "2026-10-19 12:00",
            "temp_c": 14.0,
            "condition": {"text": "Partly cloudy", "icon": "//cdn/116.png", "code": 1003},
            "wind_kph": 15.1,
            "humidity": 72,
        },
    }


class RequestLog:
    """Collects requests seen by the mock transport"""

    def __init__(self):
        self.requests: List[httpx.Request] = []


def createClient(apiConfig, handler) -> WeatherApiClient:
    return WeatherApiClient(apiConfig, transport=httpx.MockTransport(handler))


class TestWeatherApiClient:
    """Test suite for WeatherApiClient"""

    def test_get_current_weather_request(self, apiConfig, sampleCurrentResponse):
        """Test that current weather hits the current endpoint with key and q"""
        log = RequestLog()

        def handler(request: httpx.Request) -> httpx.Response:
            log.requests.append(request)
            return httpx.Response(200, json=sampleCurrentResponse)

        with createClient(apiConfig, handler) as client:
            response = client.getCurrentWeather("London")

        assert response.status_code == 200
        assert response.json()["location"]["country"] == "United Kingdom"

        assert len(log.requests) == 1
        request = log.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/v1/current.json"
        assert dict(request.url.params) == {"key": "test_key", "q": "London"}

    def test_get_weather_forecast_request(self, apiConfig):
        """Test that forecast hits the forecast endpoint with key, q and days"""
        log = RequestLog()

        def handler(request: httpx.Request) -> httpx.Response:
            log.requests.append(request)
            return httpx.Response(200, json={"forecast": {"forecastday": [{}, {}, {}, {}, {}]}})

        with createClient(apiConfig, handler) as client:
            response = client.getWeatherForecast("Berlin", 5)

        request = log.requests[0]
        assert request.url.path == "/v1/forecast.json"
        assert dict(request.url.params) == {"key": "test_key", "q": "Berlin", "days": "5"}
        assert len(getList(response.json(), "forecast.forecastday")) == 5

    def test_location_with_spaces_is_encoded(self, apiConfig):
        """Test that free-text locations are sent as a single q parameter"""
        log = RequestLog()

        def handler(request: httpx.Request) -> httpx.Response:
            log.requests.append(request)
            return httpx.Response(200, json={})

        with createClient(apiConfig, handler) as client:
            client.getCurrentWeather("San Francisco")

        assert log.requests[0].url.params["q"] == "San Francisco"

    def test_error_status_is_returned(self, apiConfig):
        """Test that API errors come back as responses, not exceptions"""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"code": 1006, "message": "No matching location found."}})

        with createClient(apiConfig, handler) as client:
            response = client.getCurrentWeather("Nowhere")

        assert response.status_code == 400
        assert getPath(response.json(), "error.code") == 1006

    def test_elapsed_time_is_available(self, apiConfig):
        """Test that response time can be asserted on"""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        with createClient(apiConfig, handler) as client:
            response = client.getCurrentWeather("London")

        assert response.elapsed.total_seconds() >= 0

    def test_transport_error_propagates(self, apiConfig):
        """Test that network failures are raised to the caller"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with createClient(apiConfig, handler) as client:
            with pytest.raises(httpx.ConnectError):
                client.getCurrentWeather("London")

    def test_timeout_propagates(self, apiConfig):
        """Test that timeouts are raised, not swallowed"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with createClient(apiConfig, handler) as client:
            with pytest.raises(httpx.TimeoutException):
                client.getWeatherForecast("London", 3)

    def test_no_retry_on_failure(self, apiConfig):
        """Test that a failing request is attempted exactly once"""
        log = RequestLog()

        def handler(request: httpx.Request) -> httpx.Response:
            log.requests.append(request)
            return httpx.Response(503)

        with createClient(apiConfig, handler) as client:
            response = client.getCurrentWeather("London")

        assert response.status_code == 503
        assert len(log.requests) == 1


class TestResponseModels:
    """Tests for dotted-path access into response bodies"""

    def test_get_path(self, sampleCurrentResponse):
        """Test nested lookups"""
        assert getPath(sampleCurrentResponse, "location.name") == "London"
        assert getPath(sampleCurrentResponse, "current.condition.text") == "Partly cloudy"
        assert getPath(sampleCurrentResponse, "current.humidity") == 72

    def test_get_path_missing(self, sampleCurrentResponse):
        """Test that missing parts give the default"""
        assert getPath(sampleCurrentResponse, "forecast") is None
        assert getPath(sampleCurrentResponse, "forecast.forecastday") is None
        assert getPath(sampleCurrentResponse, "location.name.first", "n/a") == "n/a"

    def test_get_path_keeps_falsy_values(self):
        """Test that zero and empty values are returned, not replaced by default"""
        body = {"current": {"temp_c": 0, "condition": {"text": ""}}}
        assert getPath(body, "current.temp_c", "missing") == 0
        assert getPath(body, "current.condition.text", "missing") == ""

    def test_get_path_list_index(self):
        """Test numeric parts indexing into lists"""
        body = {"forecast": {"forecastday": [{"date": "2026-10-19"}, {"date": "2026-10-20"}]}}
        assert getPath(body, "forecast.forecastday.1.date") == "2026-10-20"
        assert getPath(body, "forecast.forecastday.5.date") is None

    def test_get_list(self):
        """Test list lookups"""
        assert getList({"a": [1, 2]}, "a") == [1, 2]
        assert getList({"a": {"b": 1}}, "a") == []
        assert getList({}, "a.b") == []
