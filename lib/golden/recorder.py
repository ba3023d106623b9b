"""Recording coordinator for golden data.

Turns calls captured by RecordingTransport into golden data files, one file
per call, with secrets masked.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import httpx

import lib.utils as utils

from .masker import SecretMasker
from .transports import RecordingTransport
from .types import GoldenDataFile, GoldenDataMetadata, HttpCall

logger = logging.getLogger(__name__)

# Endpoint file name -> client method producing it
METHOD_BY_ENDPOINT = {
    "current.json": "WeatherApiClient.getCurrentWeather",
    "forecast.json": "WeatherApiClient.getWeatherForecast",
}


class GoldenDataRecorder:
    """Coordinates the recording of HTTP traffic for golden data.

    Usage:
        recorder = GoldenDataRecorder(secrets=[apiKey])
        client = WeatherApiClient(config, transport=recorder.transport)
        ...
        recorder.saveGoldenData(Path("tests/golden_data/weatherapi"))
    """

    def __init__(self, secrets: Optional[List[str]] = None, wrapped: Optional[httpx.BaseTransport] = None):
        """Initialize the recorder.

        Args:
            secrets: List of secrets to mask in recorded data
            wrapped: Transport doing the real requests, default HTTPTransport
        """
        self.masker = SecretMasker(secrets=secrets or [])
        self.transport = RecordingTransport(wrapped=wrapped)

    def getRecordedRecordings(self) -> List[HttpCall]:
        """Get all recorded calls, with secrets masked."""
        return [self.masker.maskHttpCall(call) for call in self.transport.recordings]

    def createScenario(self, call: HttpCall) -> GoldenDataFile:
        """Wrap one masked call into a golden data file with metadata."""
        endpoint = call.request.url.rsplit("/", 1)[-1]
        kwargs = {k: v for k, v in call.request.params.items() if k != "key"}
        name = utils.sanitizeFilename("_".join([endpoint.split(".")[0], *kwargs.values()]))

        return GoldenDataFile(
            metadata=GoldenDataMetadata(
                name=name,
                description=f"{call.request.method} {endpoint} {kwargs}",
                method=METHOD_BY_ENDPOINT.get(endpoint, endpoint),
                kwargs=kwargs,
                createdAt=datetime.now(timezone.utc),
            ),
            recordings=[call],
        )

    def saveGoldenData(self, outputDir: Path) -> List[Path]:
        """Save every recorded call as a golden data file.

        Files are named after endpoint and parameters, so re-recording the
        same call replaces the old file.

        Returns:
            Paths of written files
        """
        outputDir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []

        for call in self.getRecordedRecordings():
            scenario = self.createScenario(call)
            path = outputDir / f"{scenario.metadata.name}.json"
            path.write_text(utils.jsonDumps(scenario.model_dump(mode="json"), indent=2) + "\n", encoding="utf-8")
            written.append(path)
            logger.info(f"Saved golden data: {path}")

        return written

    def close(self) -> None:
        self.transport.close()
