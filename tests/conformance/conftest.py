"""
Fixtures for the weather API conformance tests.

The client is created once per session. Depending on the weather mode it
talks to the real API, replays golden data or records fresh golden data
that is saved when the session ends.
"""

import logging
from pathlib import Path
from typing import Generator

import pytest

from internal.config.manager import ConfigManager, WeatherApiConfig
from lib.conformance import SoftAssertions
from lib.golden.modes import openWeatherApiClient
from lib.weatherapi import WeatherApiClient

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def weatherApiConfig(configManager: ConfigManager) -> WeatherApiConfig:
    return configManager.getWeatherApiConfig()


@pytest.fixture(scope="session")
def weatherApiClient(
    weatherApiConfig: WeatherApiConfig, weatherMode: str, goldenDataDir: Path
) -> Generator[WeatherApiClient, None, None]:
    """
    Weather API client shared by all conformance tests

    Yields:
        WeatherApiClient: Client bound to the network, a replay or a recording transport
    """
    logger.info(f"Running weather API tests in {weatherMode} mode")
    with openWeatherApiClient(weatherApiConfig, weatherMode, goldenDataDir) as client:
        yield client


@pytest.fixture
def softAssertions() -> SoftAssertions:
    """Fresh soft assertion collector for every test"""
    return SoftAssertions()
