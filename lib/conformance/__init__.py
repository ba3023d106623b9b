"""
Conformance test support: per-test logging listener and soft assertions.
"""

from .formatter import LogFormatter
from .listener import ConformanceListener, Granularity, ResultStatus, buildTestIdentifier, cleanLogsDir
from .registry import LoggerRegistry
from .soft_assertions import SoftAssertions

__all__ = [
    "ConformanceListener",
    "Granularity",
    "LogFormatter",
    "LoggerRegistry",
    "ResultStatus",
    "SoftAssertions",
    "buildTestIdentifier",
    "cleanLogsDir",
]
