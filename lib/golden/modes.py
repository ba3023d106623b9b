"""Weather API client factory for the live, replay and record modes."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from internal.config.manager import WeatherApiConfig
from lib.weatherapi import WeatherApiClient

from .provider import GoldenDataProvider
from .recorder import GoldenDataRecorder

logger = logging.getLogger(__name__)

WEATHER_MODES = ("live", "replay", "record")


@contextmanager
def openWeatherApiClient(config: WeatherApiConfig, mode: str, goldenDataDir: Path) -> Iterator[WeatherApiClient]:
    """Open a client for the given mode, closing it on exit.

    live:   real network
    replay: answers from the golden data files in goldenDataDir
    record: real network, every call saved to goldenDataDir on exit

    Raises:
        ValueError: If mode is unknown
    """
    recorder: Optional[GoldenDataRecorder] = None
    if mode == "replay":
        transport = GoldenDataProvider(str(goldenDataDir)).createTransport()
    elif mode == "record":
        recorder = GoldenDataRecorder(secrets=[config.apiKey])
        transport = recorder.transport
    elif mode == "live":
        transport = None
    else:
        raise ValueError(f"Unknown weather mode '{mode}', expected one of: {', '.join(WEATHER_MODES)}")

    logger.info(f"Opening weather API client in {mode} mode")
    with WeatherApiClient(config, transport=transport) as client:
        yield client
        if recorder is not None:
            recorder.saveGoldenData(goldenDataDir)
