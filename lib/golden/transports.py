"""Custom httpx transports for recording and replaying HTTP traffic.

RecordingTransport wraps a real transport and keeps every request/response
pair. ReplayTransport answers requests from previously recorded pairs
without touching the network.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx

from .masker import MASKED_PLACEHOLDER
from .types import HttpCall, HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

# Recorded content is stored decoded, so these no longer describe it
DROPPED_RESPONSE_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}


def urlWithoutQuery(url: httpx.URL) -> str:
    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.path}"


class ReplayMissError(httpx.TransportError):
    """No recording matches the request."""


class RecordingTransport(httpx.BaseTransport):
    """Custom httpx transport that records all HTTP traffic.

    Requests are forwarded to the wrapped transport unchanged; each finished
    call is appended to ``recordings``.
    """

    def __init__(self, wrapped: Optional[httpx.BaseTransport] = None):
        """Initialize the recording transport.

        Args:
            wrapped: The real transport to wrap. If None, creates a default HTTPTransport.
        """
        self.wrapped = wrapped or httpx.HTTPTransport()
        self.recordings: List[HttpCall] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Forward an HTTP request and record it together with its response."""
        response = self.wrapped.handle_request(request)
        content = response.read()

        headers = {k: v for k, v in response.headers.items() if k.lower() not in DROPPED_RESPONSE_HEADERS}
        call = HttpCall(
            request=HttpRequest(
                method=request.method,
                url=urlWithoutQuery(request.url),
                headers=dict(request.headers),
                params=dict(request.url.params),
                body=request.content.decode() if request.content else None,
            ),
            response=HttpResponse(
                status_code=response.status_code,
                headers=headers,
                content=response.text,
            ),
            timestamp=datetime.now(timezone.utc),
        )
        self.recordings.append(call)
        logger.debug(f"Recorded call to {request.url}, now have {len(self.recordings)} recordings")

        return httpx.Response(
            status_code=response.status_code,
            headers=headers,
            content=content,
            request=request,
        )

    def close(self) -> None:
        self.wrapped.close()


class ReplayTransport(httpx.BaseTransport):
    """Custom httpx transport that replays recorded HTTP traffic.

    A request matches a recording when method, URL without query, and query
    parameters are equal. A masked recorded value matches any value, so a
    recording made with one API key replays for any other key.
    """

    def __init__(self, recordings: List[HttpCall]):
        """Initialize the replay transport.

        Args:
            recordings: Recorded calls to answer from
        """
        self.recordings = recordings
        self.usedRecordings: List[int] = []

    def _valuesMatch(self, recorded: Optional[str], actual: Optional[str]) -> bool:
        if recorded is not None and MASKED_PLACEHOLDER in recorded:
            return actual is not None
        return recorded == actual

    def _paramsMatch(self, recorded: Dict[str, str], actual: Dict[str, str]) -> bool:
        if recorded.keys() != actual.keys():
            return False
        return all(self._valuesMatch(value, actual[key]) for key, value in recorded.items())

    def findRecording(self, request: httpx.Request) -> Optional[int]:
        """Index of the first recording matching the request, or None."""
        url = urlWithoutQuery(request.url)
        params = dict(request.url.params)
        for index, call in enumerate(self.recordings):
            if (
                call.request.method == request.method
                and call.request.url == url
                and self._paramsMatch(call.request.params, params)
            ):
                return index
        return None

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Return a recorded response for a matching request.

        Raises:
            ReplayMissError: If no recording matches.
        """
        index = self.findRecording(request)
        if index is None:
            raise ReplayMissError(f"No recorded call found for {request.method} {request.url}", request=request)

        self.usedRecordings.append(index)
        recorded = self.recordings[index].response
        return httpx.Response(
            status_code=recorded.status_code,
            headers=recorded.headers,
            content=recorded.content.encode(),
            request=request,
        )
