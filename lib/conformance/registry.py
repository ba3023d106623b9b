"""
Registry of per-test loggers owned by the conformance listener.
"""

import logging
import threading
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def closeHandlers(localLogger: logging.Logger) -> int:
    """Close and detach every handler of a logger, return how many were closed"""
    closed = 0
    for handler in localLogger.handlers[:]:
        localLogger.removeHandler(handler)
        try:
            handler.close()
        except OSError as e:
            logger.error(f"Failed to close log handler {handler}: {e}")
        closed += 1
    return closed


class LoggerRegistry:
    """
    Maps test identifiers to their active loggers

    Safe for concurrent use. At most one logger is active per identifier:
    registering a different logger for a live identifier closes the old one
    first. A caller reusing the same logger object releases it before
    attaching new handlers.
    Handlers are detached when closed, so each is closed exactly once.
    """

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._lock = threading.Lock()
        self.closedHandlers = 0

    def register(self, identifier: str, localLogger: logging.Logger) -> None:
        with self._lock:
            previous = self._loggers.get(identifier)
            self._loggers[identifier] = localLogger
        if previous is not None and previous is not localLogger:
            logger.warning(f"Replacing active logger for {identifier}")
            self._close(previous)

    def get(self, identifier: str) -> Optional[logging.Logger]:
        with self._lock:
            return self._loggers.get(identifier)

    def release(self, identifier: str) -> int:
        """Close the logger of one identifier, return number of closed handlers"""
        with self._lock:
            localLogger = self._loggers.pop(identifier, None)
        if localLogger is None:
            return 0
        return self._close(localLogger)

    def releaseAll(self) -> int:
        """Close every registered logger and empty the registry"""
        with self._lock:
            loggers: List[logging.Logger] = list({id(v): v for v in self._loggers.values()}.values())
            self._loggers.clear()
        return sum(self._close(localLogger) for localLogger in loggers)

    def _close(self, localLogger: logging.Logger) -> int:
        closed = closeHandlers(localLogger)
        with self._lock:
            self.closedHandlers += closed
        return closed

    def identifiers(self) -> List[str]:
        with self._lock:
            return list(self._loggers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._loggers)

    def __contains__(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._loggers
