"""Secret masking for recorded HTTP traffic.

This module keeps API keys out of golden data files.
"""

import re
from typing import Any, Dict, List, Optional

from .types import HttpCall

MASKED_PLACEHOLDER = "***MASKED***"


class SecretMasker:
    """Masks secrets in HTTP requests and responses.

    Handles:
    - exact secret values anywhere in URLs, headers and bodies
    - query parameters and headers whose name looks like a secret (e.g. ``key``)
    """

    DEFAULT_PATTERNS = [r"^key$", r"api[_-]?key", r"token", r"authorization", r"password", r"secret"]

    def __init__(self, secrets: List[str], patterns: Optional[List[str]] = None):
        """Initialize the secret masker.

        Args:
            secrets: List of specific secret strings to mask
            patterns: List of regex patterns for secret keys. If None, uses DEFAULT_PATTERNS.
        """
        if patterns is None:
            patterns = self.DEFAULT_PATTERNS

        self.secrets = [v for v in secrets if v]
        self.patterns = [re.compile(p, re.IGNORECASE) for p in patterns]

    def maskText(self, text: str) -> str:
        """Replace all secrets in text with masked placeholder."""
        if not text:
            return text

        result = text
        for secret in self.secrets:
            result = result.replace(secret, MASKED_PLACEHOLDER)
        return result

    def maskDict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask secret-looking keys and secret values in a flat string mapping."""
        masked = {}
        for key, value in data.items():
            if self._isSecretKey(key):
                masked[key] = MASKED_PLACEHOLDER
            elif isinstance(value, str):
                masked[key] = self.maskText(value)
            else:
                masked[key] = value
        return masked

    def maskHttpCall(self, call: HttpCall) -> HttpCall:
        """Return a copy of the call with secrets masked in request and response."""
        request = call.request.model_copy(
            update={
                "url": self.maskText(call.request.url),
                "headers": self.maskDict(call.request.headers),
                "params": self.maskDict(call.request.params),
                "body": self.maskText(call.request.body) if call.request.body is not None else None,
            }
        )
        response = call.response.model_copy(
            update={
                "headers": self.maskDict(call.response.headers),
                "content": self.maskText(call.response.content),
            }
        )
        return HttpCall(request=request, response=response, timestamp=call.timestamp)

    def _isSecretKey(self, key: str) -> bool:
        """Check if a key name indicates it contains a secret."""
        return any(pattern.search(key) for pattern in self.patterns)
