"""Golden data recording and replay.

This package records HTTP traffic of the weather API client into JSON files,
with the API key masked, and replays those files through a custom httpx
transport so the conformance suite can run without network access.
"""

from .masker import SecretMasker
from .provider import GoldenDataProvider, findGoldenDataFiles, loadGoldenData
from .recorder import GoldenDataRecorder
from .transports import RecordingTransport, ReplayMissError, ReplayTransport
from .types import GoldenDataFile, GoldenDataMetadata, HttpCall, HttpRequest, HttpResponse

__all__ = [
    # Provider classes and functions
    "GoldenDataProvider",
    "findGoldenDataFiles",
    "loadGoldenData",
    # Recording and replay
    "GoldenDataRecorder",
    "RecordingTransport",
    "ReplayTransport",
    "ReplayMissError",
    "SecretMasker",
    # Data models
    "GoldenDataFile",
    "GoldenDataMetadata",
    "HttpCall",
    "HttpRequest",
    "HttpResponse",
]
