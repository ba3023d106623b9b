"""
Conformance test listener

A pytest plugin that writes a log artifact for every conformance test:
start line, outcome record with duration, description, groups and
parameters, failure message and stack trace. Tests are selected by the
``conformance`` marker.

Two granularities are supported:
    per-test:  logs/<testIdentifier>_<timestamp>.log for each test invocation
    per-suite: logs/test-execution_<timestamp>.log shared by the whole run

The log directory is emptied at session start, all log files are closed at
session end.
"""

import datetime
import logging
import re
import shutil
import sys
import traceback
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set

import pytest

import lib.utils as utils

from .formatter import LogFormatter
from .registry import LoggerRegistry

logger = logging.getLogger(__name__)

FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 1
SUITE_LOG_NAME = "test-execution"
CREATED = "CREATED"
RUNNING = "RUNNING"

# Markers describing how a test runs, not which group it belongs to
NON_GROUP_MARKERS = {"parametrize", "usefixtures", "filterwarnings", "skip", "skipif", "xfail"}


class Granularity(str, Enum):
    PER_TEST = "per-test"
    PER_SUITE = "per-suite"


class ResultStatus(str, Enum):
    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


LEVEL_BY_STATUS = {
    ResultStatus.PASSED: logging.INFO,
    ResultStatus.FAILED: logging.ERROR,
    ResultStatus.SKIPPED: logging.WARNING,
}


def buildTestIdentifier(name: str, parameters: Sequence[Any]) -> str:
    """Function name plus parameter values, whitespace in values replaced by ``_``"""
    if not parameters:
        return name
    return name + "_" + "_".join(re.sub(r"\s+", "_", str(p)) for p in parameters)


def getParameters(item: pytest.Item) -> List[Any]:
    """Parameter values of a parametrized item, in argument order"""
    callspec = getattr(item, "callspec", None)
    if callspec is None:
        return []
    return list(callspec.params.values())


def getFunctionName(item: pytest.Item) -> str:
    return getattr(item, "originalname", None) or item.name


def getDescription(item: pytest.Item) -> str:
    """First non-empty docstring line of the test function"""
    doc = getattr(getattr(item, "function", None), "__doc__", None) or ""
    for line in doc.splitlines():
        if line.strip():
            return line.strip()
    return ""


def getTestClassName(item: pytest.Item) -> str:
    module = getattr(getattr(item, "module", None), "__name__", "")
    cls = getattr(item, "cls", None)
    if cls is not None:
        return f"{module}.{cls.__name__}" if module else cls.__name__
    return module


def getGroups(item: pytest.Item, excluded: Set[str]) -> List[str]:
    """Marker names of an item, closest first, without runner markers"""
    groups: List[str] = []
    for marker in item.iter_markers():
        if marker.name not in excluded and marker.name not in groups:
            groups.append(marker.name)
    return groups


def findFailedParameters(parameters: Sequence[Any], error: Optional[BaseException]) -> Set[str]:
    """
    Guess which parameters caused an assertion failure

    A parameter is reported when its string form occurs in the assertion
    message. This is a substring heuristic: short values may match by
    accident and values formatted differently in the message are missed.

    Returns:
        String forms of the matching parameters, empty unless error is an
        AssertionError with a non-empty message
    """
    if not isinstance(error, AssertionError):
        return set()
    message = str(error)
    if not message:
        return set()
    return {str(p) for p in parameters if p is not None and str(p) in message}


def formatResult(
    status: ResultStatus,
    name: str,
    durationMs: int,
    description: str,
    testClass: str,
    groups: Sequence[str],
    parameters: Sequence[Any],
    error: Optional[BaseException] = None,
) -> str:
    """Build the multi-line outcome record written to a test log"""
    lines = [f"\tTest {status.value}: {name}", f"\tDuration: {durationMs}ms"]
    if description:
        lines.append(f"\tDescription: {description}")
    lines.append(f"\tTest Class: {testClass}")
    if groups:
        lines.append(f"\tGroups: {', '.join(groups)}")

    if parameters:
        lines.append("Test Parameters:")
        failedValues = findFailedParameters(parameters, error) if status is ResultStatus.FAILED else set()
        for index, param in enumerate(parameters, start=1):
            failMarker = " [FAILED]" if param is not None and str(param) in failedValues else ""
            lines.append(f"  {index}. [{type(param).__name__}] {param}{failMarker}")

    if status is ResultStatus.FAILED and error is not None:
        lines.append("")
        lines.append("Failure Details:")
        lines.append(str(error))

    return "\n".join(lines)


def cleanLogsDir(logsDir: Path) -> int:
    """
    Delete everything inside the log directory, creating it if absent

    Entries that cannot be deleted are logged and left in place. A log path
    that cannot be created or listed is logged too, the run goes on without
    file logs.

    Returns:
        Number of deleted entries
    """
    try:
        logsDir.mkdir(parents=True, exist_ok=True)
        entries = sorted(logsDir.iterdir())
    except OSError as e:
        logger.error(f"Failed to prepare log directory {logsDir}: {e}")
        return 0

    deleted = 0
    for entry in entries:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            deleted += 1
        except OSError as e:
            logger.error(f"Failed to delete file: {entry.name}: {e}")
    return deleted


class ConformanceListener:
    """
    Records the lifecycle of conformance tests into log files

    Each tracked test moves CREATED -> RUNNING -> PASSED | FAILED | SKIPPED.
    Entering RUNNING opens its log (per-test granularity), reaching a final
    state appends the outcome record. Log I/O problems are reported through
    the module logger and never fail the run.
    """

    def __init__(
        self,
        logsDir: str = "logs",
        granularity: Granularity = Granularity.PER_TEST,
        maxBytes: int = DEFAULT_MAX_BYTES,
        backupCount: int = DEFAULT_BACKUP_COUNT,
        markerName: str = "conformance",
        console: bool = True,
    ):
        """
        Initialize listener

        Args:
            logsDir: Directory for log files, emptied at session start
            granularity: One log file per test or one per session
            maxBytes: Size at which a log file is rotated
            backupCount: Rotated generations to keep
            markerName: Only items with this marker are recorded
            console: Also write records to stderr
        """
        self.logsDir = Path(logsDir)
        self.granularity = Granularity(granularity)
        self.maxBytes = maxBytes
        self.backupCount = backupCount
        self.markerName = markerName
        self.console = console
        self.registry = LoggerRegistry()
        self.suiteLogger: Optional[logging.Logger] = None
        # Test identifier -> CREATED, RUNNING or a ResultStatus value
        self.states: Dict[str, str] = {}

    @classmethod
    def fromConfig(cls, config: Dict[str, Any]) -> "ConformanceListener":
        """Create listener from the [listener] config section"""
        return cls(
            logsDir=config.get("logs-dir", "logs"),
            granularity=Granularity(config.get("granularity", Granularity.PER_TEST.value)),
            maxBytes=int(config.get("max-bytes", DEFAULT_MAX_BYTES)),
            backupCount=int(config.get("backup-count", DEFAULT_BACKUP_COUNT)),
            console=bool(config.get("console", True)),
        )

    # Test lifecycle

    def isTracked(self, item: pytest.Item) -> bool:
        return item.get_closest_marker(self.markerName) is not None

    def getTestIdentifier(self, item: pytest.Item) -> str:
        return buildTestIdentifier(getFunctionName(item), getParameters(item))

    def changeState(self, identifier: str, newState: str) -> str:
        """
        Move a test identifier to a new state, return the previous one

        RUNNING may follow CREATED or a final state (repeated invocation),
        final states must follow RUNNING. Other changes are applied but
        reported as warnings.
        """
        previous = self.states.get(identifier, CREATED)
        if newState == RUNNING:
            valid = previous != RUNNING
        else:
            valid = previous == RUNNING
        if not valid:
            logger.warning(f"Unexpected state change for {identifier}: {previous} -> {newState}")
        self.states[identifier] = newState
        return previous

    def onSuiteStart(self) -> None:
        cleanLogsDir(self.logsDir)
        if self.granularity is Granularity.PER_SUITE:
            self.suiteLogger = self._createLogger(SUITE_LOG_NAME)
            if self.suiteLogger is not None:
                self.registry.register(SUITE_LOG_NAME, self.suiteLogger)

    def onSuiteFinish(self) -> None:
        closed = self.registry.releaseAll()
        self.suiteLogger = None
        self.states.clear()
        logger.debug(f"Closed {closed} log handlers")

    def onTestStart(self, item: pytest.Item) -> None:
        identifier = self.getTestIdentifier(item)
        self.changeState(identifier, RUNNING)

        if self.granularity is Granularity.PER_TEST:
            # Repeated identifiers share one logger object, detach the finished run first
            self.registry.release(identifier)
            testLogger = self._createLogger(identifier)
            if testLogger is None:
                return
            self.registry.register(identifier, testLogger)
        else:
            testLogger = self.suiteLogger
            if testLogger is None:
                return

        groups = getGroups(item, NON_GROUP_MARKERS | {self.markerName})
        testLogger.info(f"=== Starting Test: {item.name} [{', '.join(groups)}] ===")

    def onTestSuccess(self, item: pytest.Item, durationMs: int) -> None:
        self.logTestResult(item, ResultStatus.PASSED, durationMs)

    def onTestFailure(self, item: pytest.Item, durationMs: int, error: Optional[BaseException]) -> None:
        self.logTestResult(item, ResultStatus.FAILED, durationMs, error)
        testLogger = self.getLoggerForTest(item)
        if testLogger is not None and error is not None:
            testLogger.error(f"Failure Details: {type(error).__name__}: {error}")

    def onTestSkipped(self, item: pytest.Item, durationMs: int) -> None:
        self.logTestResult(item, ResultStatus.SKIPPED, durationMs)

    def getLoggerForTest(self, item: pytest.Item) -> Optional[logging.Logger]:
        if self.granularity is Granularity.PER_SUITE:
            return self.suiteLogger
        return self.registry.get(self.getTestIdentifier(item))

    def logTestResult(
        self, item: pytest.Item, status: ResultStatus, durationMs: int, error: Optional[BaseException] = None
    ) -> None:
        identifier = self.getTestIdentifier(item)
        self.changeState(identifier, status.value)

        testLogger = self.getLoggerForTest(item)
        if testLogger is None:
            logger.error(f"Logger not found for test: {item.name}")
            return

        message = formatResult(
            status=status,
            name=item.name,
            durationMs=durationMs,
            description=getDescription(item),
            testClass=getTestClassName(item),
            groups=getGroups(item, NON_GROUP_MARKERS | {self.markerName}),
            parameters=getParameters(item),
            error=error,
        )

        if status is ResultStatus.FAILED and error is not None:
            stackTrace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            testLogger.debug(f"Stack trace:\n{stackTrace}")

        testLogger.log(LEVEL_BY_STATUS[status], message)

    def _createLogger(self, name: str) -> Optional[logging.Logger]:
        """Create a non-propagating logger writing to a fresh file and the console"""
        timestamp = datetime.datetime.now().strftime(FILE_TIMESTAMP_FORMAT)
        baseName = f"{utils.sanitizeFilename(name)}_{timestamp}"
        logFile = self.logsDir / f"{baseName}.log"
        counter = 1
        # Same identifier twice within a second, keep the earlier file
        while logFile.exists():
            counter += 1
            logFile = self.logsDir / f"{baseName}_{counter}.log"
        formatter = LogFormatter()

        try:
            self.logsDir.mkdir(parents=True, exist_ok=True)
            fileHandler = RotatingFileHandler(
                logFile, maxBytes=self.maxBytes, backupCount=self.backupCount, encoding="utf-8"
            )
        except OSError as e:
            logger.error(f"Failed to create logger for test {name}: {e}")
            return None

        fileHandler.setFormatter(formatter)

        testLogger = logging.getLogger(f"{__name__}.{name}")
        testLogger.propagate = False
        testLogger.setLevel(logging.DEBUG)
        testLogger.addHandler(fileHandler)

        if self.console:
            consoleHandler = logging.StreamHandler(sys.stderr)
            consoleHandler.setFormatter(formatter)
            testLogger.addHandler(consoleHandler)

        return testLogger

    # pytest hooks

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        self.onSuiteStart()

    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: int) -> None:
        self.onSuiteFinish()

    @pytest.hookimpl(tryfirst=True)
    def pytest_runtest_protocol(self, item: pytest.Item, nextitem: Optional[pytest.Item]) -> None:
        if self.isTracked(item):
            self.onTestStart(item)

    @pytest.hookimpl(hookwrapper=True)
    def pytest_runtest_makereport(self, item: pytest.Item, call: pytest.CallInfo):
        outcome = yield
        report: pytest.TestReport = outcome.get_result()

        if not self.isTracked(item):
            return
        # Setup only produces a final state when the test will not be called
        if report.when == "setup" and report.passed:
            return
        if report.when not in ("setup", "call"):
            return

        durationMs = int(report.duration * 1000)
        if report.passed:
            self.onTestSuccess(item, durationMs)
        elif report.skipped:
            self.onTestSkipped(item, durationMs)
        else:
            self.onTestFailure(item, durationMs, call.excinfo.value if call.excinfo else None)
