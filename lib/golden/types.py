"""Data models for golden data files.

A golden data file holds metadata about one recorded client call and the
HTTP traffic it produced.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class HttpRequest(BaseModel):
    """HTTP request details captured during recording."""

    method: str
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    params: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None


class HttpResponse(BaseModel):
    """HTTP response details captured during recording."""

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    content: str


class HttpCall(BaseModel):
    """Complete HTTP call with request, response, and timestamp."""

    request: HttpRequest
    response: HttpResponse
    timestamp: datetime


class GoldenDataMetadata(BaseModel):
    """What was called to produce the recordings."""

    name: str
    description: str
    method: str
    kwargs: Dict[str, Any] = Field(default_factory=dict)
    createdAt: datetime


class GoldenDataFile(BaseModel):
    """On-disk format of one golden data scenario."""

    metadata: GoldenDataMetadata
    recordings: List[HttpCall]
